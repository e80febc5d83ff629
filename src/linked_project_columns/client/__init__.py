"""GitHub API client and column reconciliation."""

from .api_client import ProjectColumnsClient
from .column_reconcile import CardMirror, ensure_card_at_index, find_card

__all__ = ["CardMirror", "ProjectColumnsClient", "ensure_card_at_index", "find_card"]
