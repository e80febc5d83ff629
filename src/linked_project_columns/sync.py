"""Mirror one or more source project columns into a target column.

Run phases:
  1) Fetch source and target columns (all pages)
  2) Filter: ignored cards out of the target, full filter chain on sources
  3) Place the automation note (optional)
  4) Per source column: place its header note (optional), then its cards
  5) Delete everything in the target past the last placed card

All remote calls are issued one at a time, in order.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from .client.api_client import ProjectColumnsClient
from .client.column_reconcile import (
    CardMirror,
    CardOperations,
    DryRunCardOperations,
    ensure_card_at_index,
)
from .config import ActionConfig
from .filters import TARGET_FILTERS, apply_filters, build_source_filters
from .models import Card
from .notices import new_automation_note, new_column_header_note

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """What a run did (or, in dry-run mode, would do) to the target column."""

    dry_run: bool = False
    added: int = 0
    moved: int = 0
    deleted: int = 0
    failed_adds: int = 0
    placed: int = 0
    operations: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_operations(cls, operations: CardOperations, placed: int) -> "SyncSummary":
        summary = cls(dry_run=operations.dry_run, placed=placed, operations=list(operations.records))
        for record in operations.records:
            if record["op"] == "add":
                if record["ok"]:
                    summary.added += 1
                else:
                    summary.failed_adds += 1
            elif record["op"] == "move":
                summary.moved += 1
            elif record["op"] == "delete":
                summary.deleted += 1
        return summary

    @property
    def changed(self) -> bool:
        return bool(self.added or self.moved or self.deleted)


async def sync_columns(config: ActionConfig, client: ProjectColumnsClient) -> SyncSummary:
    """Make the target column mirror the filtered source columns."""
    source_columns, target_column = await client.get_project_columns(
        config.source_column_ids, config.target_column_id
    )
    for column in source_columns:
        logger.info(f"source column: {column.project.name}:{column.name} ({len(column.cards.nodes)} cards)")
    logger.info(f"target column: {target_column.project.name}:{target_column.name} ({len(target_column.cards.nodes)} cards)")

    target_column.cards.nodes = apply_filters(target_column.cards.nodes, TARGET_FILTERS)
    source_filters = build_source_filters(config)
    for column in source_columns:
        column.cards.nodes = apply_filters(column.cards.nodes, source_filters)

    mirror = CardMirror.from_column(target_column)
    operations: CardOperations = DryRunCardOperations() if config.dry_run else CardOperations(client)

    target_index = 0

    async def place(card: Card) -> None:
        nonlocal target_index
        placed = await ensure_card_at_index(
            mirror,
            target_index,
            lambda: mirror.find(card),
            lambda: card,
            operations,
        )
        # a refused add leaves the index free for the next card
        if placed is not None:
            target_index += 1

    if config.automation_notice:
        logger.info("ensuring automation note")
        await place(Card.from_note(new_automation_note(source_columns)))

    for column in source_columns:
        if config.source_column_notices:
            logger.info(f"ensuring column header note for {column.name}")
            await place(Card.from_note(new_column_header_note(column)))

        logger.info(f"syncing {len(column.cards.nodes)} cards from {column.project.name}:{column.name}")
        for source_card in column.cards.nodes:
            await place(source_card)

    await delete_trailing_cards(mirror, target_index, operations)

    summary = SyncSummary.from_operations(operations, placed=target_index)
    log_summary(summary)
    return summary


async def delete_trailing_cards(mirror: CardMirror, keep: int, operations: CardOperations) -> None:
    """Delete cards at index ``keep`` and beyond, last card first."""
    if len(mirror) > keep:
        logger.info(f"deleting {len(mirror) - keep} extra card(s) from {mirror.column_name}")
    while len(mirror) > keep:
        delete_index = len(mirror) - 1
        await operations.delete(mirror[delete_index])
        mirror.remove(delete_index)


def log_summary(summary: SyncSummary) -> None:
    logger.info("[SUMMARY]")
    if summary.dry_run:
        logger.info("   Dry-run: no changes were made")
    logger.info(f"   Placed: {summary.placed}")
    logger.info(f"   Added: {summary.added}")
    logger.info(f"   Moved: {summary.moved}")
    logger.info(f"   Deleted: {summary.deleted}")
    if summary.failed_adds:
        logger.warning(f"{summary.failed_adds} card(s) could not be added to the target column")
