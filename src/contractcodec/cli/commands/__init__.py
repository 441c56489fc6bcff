"""CLI command modules."""

from . import contract_group

__all__ = ["contract_group"]
