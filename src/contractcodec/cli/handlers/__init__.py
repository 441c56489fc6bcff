"""CLI command handlers containing business logic."""

from contractcodec.cli.handlers.contract_handler import ContractHandler

__all__ = ["ContractHandler"]
