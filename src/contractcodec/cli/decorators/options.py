"""Common CLI option decorators."""

from __future__ import annotations

import click


def with_output_file(f):
    """Add --output option to command.

    Example:
        @click.command()
        @with_output_file
        def my_command(output):
            pass
    """
    return click.option(
        "--output",
        "-o",
        type=click.Path(),
        help="Output file path",
    )(f)
