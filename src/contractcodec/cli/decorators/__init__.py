"""CLI decorators for common options and error handling."""

from contractcodec.cli.decorators.error_handling import handle_errors
from contractcodec.cli.decorators.options import with_output_file

__all__ = [
    "handle_errors",
    "with_output_file",
]
