"""Output formatting utilities for CLI."""

from __future__ import annotations

from typing import Any, Dict, List

import click

from contractcodec.core.errors import CodecWarning, TableError


class OutputFormatter:
    """Format output for CLI display.

    Provides consistent formatting for success messages, errors, warnings
    and codec findings.

    Example:
        >>> out = OutputFormatter()
        >>> out.success("Imported 3 tables")
        >>> out.stats({"tables": 3, "columns": 17})
    """

    @staticmethod
    def success(message: str) -> None:
        """Display success message with checkmark.

        Args:
            message: Success message to display
        """
        click.echo(f"✓ {message}")

    @staticmethod
    def error(message: str, abort: bool = False) -> None:
        """Display error message.

        Args:
            message: Error message to display
            abort: Whether to abort command execution after displaying error
        """
        click.echo(f"❌ {message}", err=True)
        if abort:
            raise click.Abort()

    @staticmethod
    def warning(message: str) -> None:
        click.echo(f"⚠️  {message}")

    @staticmethod
    def info(message: str) -> None:
        click.echo(f"ℹ️  {message}")

    @staticmethod
    def section(title: str) -> None:
        click.echo(f"\n{title}")

    @staticmethod
    def stats(stats_dict: Dict[str, Any], indent: str = "   ") -> None:
        """Display statistics dictionary in key: value format.

        Args:
            stats_dict: Dictionary of statistics to display
            indent: Indentation string for each line
        """
        for key, value in stats_dict.items():
            click.echo(f"{indent}{key}: {value}")

    @staticmethod
    def list_items(items: List[str], indent: str = "   ", bullet: str = "-") -> None:
        for item in items:
            click.echo(f"{indent}{bullet} {item}")

    @classmethod
    def findings(
        cls, warnings: List[CodecWarning], errors: List[TableError] = None
    ) -> None:
        """Display codec warnings and rejected tables.

        Args:
            warnings: Non-fatal findings
            errors: Tables rejected during import
        """
        if errors:
            cls.section(f"Rejected tables ({len(errors)}):")
            for error in errors:
                where = f"{error.table}.{error.column}" if error.column else error.table
                click.echo(f"   ❌ {where}: {error.message}")
        if warnings:
            cls.section(f"Warnings ({len(warnings)}):")
            cls.list_items([str(warning) for warning in warnings])

    @staticmethod
    def next_steps(title: str, steps: List[str]) -> None:
        """Display next steps section.

        Args:
            title: Section title
            steps: List of next step descriptions
        """
        click.echo(f"\n{title}")
        for step in steps:
            click.echo(f"   - {step}")
