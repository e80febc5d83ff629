"""Mirror cards from GitHub project columns into a target column."""

from .config import ActionConfig
from .models import Card, CardContent, ProjectColumn
from .sync import SyncSummary, sync_columns

__version__ = "2.0.0"

__all__ = [
    "ActionConfig",
    "Card",
    "CardContent",
    "ProjectColumn",
    "SyncSummary",
    "sync_columns",
]
