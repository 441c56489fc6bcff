"""CLI entry point for contractcodec."""

from __future__ import annotations

import click

from contractcodec import __version__

# Import command groups
from contractcodec.cli.commands import contract_group
from contractcodec.utils.config import load_config
from contractcodec.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    envvar="CONTRACTCODEC_CONFIG",
    help="Path to config.yml file (or set CONTRACTCODEC_CONFIG)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level",
)
@click.pass_context
def cli(ctx, config, log_level):
    """contractcodec - Lossless conversion between flat tables and data contracts.

    \b
    Examples:
        # Import a contract into the flat model
        contractcodec contract import orders.yaml -o orders.model.json

        # Export the model back to a contract
        contractcodec contract export orders.model.json -o orders.yaml

        # Check that a document survives import and export unchanged
        contractcodec contract roundtrip orders.yaml

        # Show the flat column table
        contractcodec contract inspect orders.yaml
    """
    ctx.ensure_object(dict)

    # Setup logging
    setup_logging(level=log_level)

    # Load config if provided
    if config:
        ctx.obj["config"] = load_config(config)


# Register command groups
cli.add_command(contract_group.contract_group)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
