"""CLI output helpers."""

from contractcodec.cli.output.formatters import OutputFormatter

__all__ = ["OutputFormatter"]
