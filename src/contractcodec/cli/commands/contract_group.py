"""Contract commands - import, export, roundtrip, inspect."""

from __future__ import annotations

import click
import pandas as pd

from contractcodec.cli.decorators import handle_errors, with_output_file
from contractcodec.cli.handlers import ContractHandler
from contractcodec.cli.output import OutputFormatter
from contractcodec.utils.config import get_config
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.group(name="contract")
def contract_group():
    """Convert between contract documents and the flat table model.

    This command group imports ODCS contract documents into the flat model,
    exports saved models back, and checks that the two directions agree.
    """
    pass


@contract_group.command(name="import")
@click.argument("document", type=click.Path(exists=True))
@with_output_file
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on the first malformed table instead of skipping it",
)
@handle_errors
def import_cmd(document, output, strict):
    """Import a contract document into the flat model.

    DOCUMENT: Contract file (YAML, or JSON with a .json suffix)

    \b
    Examples:
        # Import and save the model
        contractcodec contract import orders.yaml -o orders.model.json

        # Fail on the first malformed table
        contractcodec contract import orders.yaml --strict
    """
    handler = ContractHandler(get_config(), strict=strict)
    model = handler.import_file(document, output)

    out.success(f"Imported {document}")
    out.stats(
        {
            "tables": len(model.tables),
            "columns": sum(len(table.columns) for table in model.tables),
            "relationships": len(model.relationships),
            "compound keys": sum(len(table.compound_keys) for table in model.tables),
        }
    )
    out.findings(model.warnings, model.errors)

    if output:
        out.success(f"Model saved to {output}")
        out.next_steps(
            "Next steps:", [f"contractcodec contract export {output} -o contract.yaml"]
        )


@contract_group.command(name="export")
@click.argument("model_file", type=click.Path(exists=True))
@with_output_file
@handle_errors
def export_cmd(model_file, output):
    """Export a saved model as a contract document.

    MODEL_FILE: Model JSON written by 'contract import -o'

    \b
    Examples:
        contractcodec contract export orders.model.json -o orders.yaml
    """
    handler = ContractHandler(get_config())
    result = handler.export_file(model_file, output)

    if output:
        out.success(f"Contract written to {output}")
    else:
        click.echo(handler.dump_document(result.document), nl=False)
    out.findings(result.warnings)


@contract_group.command(name="roundtrip")
@click.argument("document", type=click.Path(exists=True))
@with_output_file
@handle_errors
def roundtrip_cmd(document, output):
    """Import then export a document and report whether it is unchanged.

    Exits with status 1 when the re-exported tree differs from the input.

    \b
    Examples:
        contractcodec contract roundtrip orders.yaml -o orders.out.yaml
    """
    handler = ContractHandler(get_config())
    report = handler.roundtrip_file(document, output)

    out.findings(report["result"].warnings)
    if output:
        out.info(f"Re-exported document written to {output}")

    if report["identical"]:
        out.success("Round trip is lossless")
        return
    out.warning("Re-exported document differs from the input")
    raise click.exceptions.Exit(1)


@contract_group.command(name="inspect")
@click.argument("document", type=click.Path(exists=True))
@click.option("--table", "-t", "table_name", help="Only show columns of this table")
@handle_errors
def inspect_cmd(document, table_name):
    """Print the flat column arena of a contract document.

    \b
    Examples:
        contractcodec contract inspect orders.yaml
        contractcodec contract inspect orders.yaml --table orders
    """
    handler = ContractHandler(get_config())
    frame = handler.inspect_file(document)

    if table_name:
        frame = frame[frame["table"] == table_name]
        if frame.empty:
            out.error(f"No columns found for table '{table_name}'", abort=True)

    with pd.option_context("display.max_rows", None, "display.width", 200):
        click.echo(frame.to_string(index=False))
