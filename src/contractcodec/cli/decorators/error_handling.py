"""Error handling decorators for CLI commands."""

from __future__ import annotations

import json
import signal
import sys
from functools import wraps

import click
import yaml

from contractcodec.core.errors import CodecError
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)

# Handle SIGPIPE gracefully (prevent BrokenPipeError when piping to head, etc.)
try:
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)
except AttributeError:
    # Windows doesn't have SIGPIPE
    pass


def handle_errors(f):
    """Decorator to handle common errors in CLI commands.

    Catches exceptions and displays user-friendly error messages,
    then aborts the command gracefully.

    Example:
        @click.command()
        @handle_errors
        def my_command():
            # Your command logic
            pass
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.Abort, click.exceptions.Exit):
            # Let Click handle these
            raise
        except BrokenPipeError:
            # Close stdout/stderr to avoid further errors
            devnull = open("/dev/null", "w")
            sys.stdout = devnull
            sys.stderr = devnull
            sys.exit(0)
        except FileNotFoundError as e:
            click.echo(f"❌ File not found: {e}", err=True)
            raise click.Abort()
        except PermissionError as e:
            click.echo(f"❌ Permission denied: {e}", err=True)
            raise click.Abort()
        except CodecError as e:
            location = ".".join(
                part for part in (getattr(e, "table", None), getattr(e, "column", None)) if part
            )
            prefix = f"{location}: " if location else ""
            click.echo(f"❌ Invalid contract: {prefix}{e}", err=True)
            logger.debug("CodecError details", exc_info=True)
            raise click.Abort()
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            click.echo(f"❌ Could not parse input: {e}", err=True)
            raise click.Abort()
        except ValueError as e:
            click.echo(f"❌ Invalid value: {e}", err=True)
            logger.debug("ValueError details", exc_info=True)
            raise click.Abort()
        except KeyError as e:
            click.echo(f"❌ Missing key: {e}", err=True)
            logger.debug("KeyError details", exc_info=True)
            raise click.Abort()
        except Exception as e:
            click.echo(f"❌ Unexpected error: {e}", err=True)
            logger.exception("Unexpected error in command")
            raise click.Abort()

    return wrapper
