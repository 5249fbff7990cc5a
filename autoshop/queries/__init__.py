"""Ledger queries package."""

from autoshop.queries.executor import LedgerQueries

__all__ = ["LedgerQueries"]
