"""GitHub project columns API - fetch, paginate, add, move and delete cards."""

import json
import logging
from typing import Any

from ..models import Card, ColumnNotFoundError, GitHubAPIError, NetworkError, ProjectColumn
from . import queries
from .api_client_core import GitHubClientCore

logger = logging.getLogger(__name__)


class ProjectColumnsClient(GitHubClientCore):
    """Card-level operations on GitHub classic project columns."""

    async def get_project_columns(
        self, source_column_ids: list[str], target_column_id: str
    ) -> tuple[list[ProjectColumn], ProjectColumn]:
        """Fetch source and target columns in one request, then every page.

        Returns:
            (source columns in request order, target column)
        """
        data = await self.execute(
            queries.GET_PROJECT_COLUMNS,
            {"sourceColumnIds": source_column_ids, "targetColumnId": target_column_id},
        )

        raw_sources = data.get("sourceColumns") or []
        source_columns: list[ProjectColumn] = []
        for column_id, raw in zip(source_column_ids, raw_sources):
            if not raw:
                raise ColumnNotFoundError(column_id)
            source_columns.append(ProjectColumn.model_validate(raw))
        if len(source_columns) != len(source_column_ids):
            missing = source_column_ids[len(source_columns)]
            raise ColumnNotFoundError(missing)

        raw_target = data.get("targetColumn")
        if not raw_target:
            raise ColumnNotFoundError(target_column_id)
        target_column = ProjectColumn.model_validate(raw_target)

        await self.complete_all([*source_columns, target_column])
        return source_columns, target_column

    async def complete_all(self, columns: list[ProjectColumn]) -> None:
        """Append every remaining page of cards to each column, in place.

        Pages of one column are requested strictly in sequence, each after the
        cursor returned by the previous page. Columns are completed one after
        the other.
        """
        for column in columns:
            fetched = 0
            while column.cards.page_info.has_next_page:
                cursor = column.cards.page_info.end_cursor
                logger.info(f"paginating {column.project.name}:{column.name} after {cursor}")

                data = await self.execute(queries.GET_SINGLE_PROJECT_COLUMN, {"id": column.id, "after": cursor})
                raw = data.get("column")
                if not raw:
                    raise ColumnNotFoundError(column.id)
                page = ProjectColumn.model_validate(raw)

                column.cards.nodes.extend(page.cards.nodes)
                column.cards.page_info = page.cards.page_info
                fetched += 1

            if fetched:
                logger.info(
                    f"{column.project.name}:{column.name} complete with {len(column.cards.nodes)} cards "
                    f"after {fetched} extra page(s)"
                )

    async def add_card_to_column(self, column_id: str, card: Card) -> Card | None:
        """Create a card equivalent to ``card`` at the top of a column.

        Returns the created card, or None when GitHub rejects it. A rejected
        add is logged as a warning and never raised.
        """
        card_data = card.payload()
        try:
            data = await self.execute(queries.ADD_PROJECT_CARD, {"columnId": column_id, **card_data})
            return Card.model_validate(_card_edge_node(data, "addProjectCard"))
        except GitHubAPIError as err:
            logger.warning(f"Could not add card for payload {json.dumps(card_data)}")
            logger.warning(str(err))
            return None

    async def move_card(self, card_id: str, column_id: str, after_card_id: str | None) -> Card:
        """Move a card to directly after ``after_card_id`` (top when None)."""
        data = await self.execute(
            queries.MOVE_PROJECT_CARD,
            {"cardId": card_id, "columnId": column_id, "afterCardId": after_card_id},
        )
        return Card.model_validate(_card_edge_node(data, "moveProjectCard"))

    async def delete_card(self, card_id: str) -> str:
        """Delete a card and return the id GitHub reports as deleted."""
        data = await self.execute(queries.DELETE_PROJECT_CARD, {"cardId": card_id})
        result = data.get("deleteProjectCard") or {}
        deleted_id = result.get("deletedCardId")
        if deleted_id is None:
            raise NetworkError(f"Invalid response from deleteProjectCard: {data}")
        return deleted_id


def _card_edge_node(data: dict[str, Any], field: str) -> dict[str, Any]:
    try:
        node = data[field]["cardEdge"]["node"]
    except (KeyError, TypeError) as err:
        raise NetworkError(f"Invalid response from {field}: {data}") from err
    if not node:
        raise NetworkError(f"Invalid response from {field}: {data}")
    return node
