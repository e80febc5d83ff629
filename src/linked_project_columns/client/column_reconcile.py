"""
Order-preserving reconciliation of a single project column.

Places desired cards one index at a time into a target column, keeping the
identity of cards that already exist (move instead of delete + create).

The GitHub API only offers relative positioning:
  - add a card (always lands at the top of the column)
  - move a card after another card (or to the top)
  - delete a card by id

Reconciliation walks the desired cards left to right and, for each one, makes
sure it sits at the next target index:
  1) Find an equivalent card in the local mirror of the target column
  2) Create it when absent (inserted at index 0, as GitHub does)
  3) Move it to the target index when it is anywhere else

Once index i is settled it is never revisited, so the "after" card of every
later move is read from settled state. The mirror is write-through: it is
only changed after the matching remote call has returned.

Adds that GitHub rejects are skipped; the following cards simply take the
index that card would have had.
"""
import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Any

from ..models import Card, ProjectColumn
from .api_client import ProjectColumnsClient

logger = logging.getLogger(__name__)

FindResult = tuple[Card | None, int]


def find_card(card: Card, cards: Sequence[Card]) -> FindResult:
    """Find the first card equivalent to ``card``.

    Content cards match on content id, note cards on exact note text. A
    content card never matches a note card.

    Returns:
        (matching card, its index) or (None, -1)
    """
    if card.content is not None:
        content_id = card.content.id
        for index, candidate in enumerate(cards):
            if candidate.content is not None and candidate.content.id == content_id:
                return candidate, index
    else:
        for index, candidate in enumerate(cards):
            if candidate.note and candidate.note == card.note:
                return candidate, index
    return None, -1


class CardMirror:
    """Local, index-addressed copy of a column's card order.

    ``insert`` and ``remove`` are the only mutations. Positions are always
    computed from the current contents, never cached.
    """

    def __init__(self, column_id: str, column_name: str, cards: list[Card] | None = None):
        self.column_id = column_id
        self.column_name = column_name
        self._cards: list[Card] = list(cards or [])

    @classmethod
    def from_column(cls, column: ProjectColumn) -> "CardMirror":
        return cls(column.id, column.name, column.cards.nodes)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __getitem__(self, index: int) -> Card:
        return self._cards[index]

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def insert(self, index: int, card: Card) -> None:
        self._cards.insert(index, card)

    def remove(self, index: int) -> Card:
        return self._cards.pop(index)

    def find(self, card: Card) -> FindResult:
        return find_card(card, self._cards)

    def after_card_id(self, from_index: int, to_index: int) -> str | None:
        """Id of the card that will directly precede a card moved to ``to_index``.

        Computed as if the moved card were already taken out of the column;
        past the end resolves to the last remaining card.
        """
        if to_index <= 0:
            return None
        others = [c for i, c in enumerate(self._cards) if i != from_index]
        if not others:
            return None
        return others[min(to_index, len(others)) - 1].id

    def describe(self) -> list[str | None]:
        return [c.display_text for c in self._cards]


class CardOperations:
    """Remote mutations used by reconciliation, with a record of each one."""

    dry_run = False

    def __init__(self, client: ProjectColumnsClient | None):
        self.client = client
        self.records: list[dict[str, Any]] = []

    async def add(self, column_id: str, card: Card) -> Card | None:
        logger.info(f"adding card to column {column_id}: {card.payload()}")
        created = await self._add(column_id, card)
        self.records.append({
            "op": "add",
            "column_id": column_id,
            "payload": card.payload(),
            "card_id": created.id if created else None,
            "ok": created is not None,
        })
        if created is not None:
            logger.info(f"created card: {created.id}")
        return created

    async def move(self, card: Card, column_id: str, after_card_id: str | None) -> Card:
        logger.info(f"moving card {card.id} after {after_card_id}")
        moved = await self._move(card, column_id, after_card_id)
        self.records.append({
            "op": "move",
            "column_id": column_id,
            "card_id": card.id,
            "after_card_id": after_card_id,
        })
        return moved

    async def delete(self, card: Card) -> None:
        logger.info(f"deleting card {card.id} ({card.display_text!r})")
        await self._delete(card)
        self.records.append({"op": "delete", "card_id": card.id})

    async def _add(self, column_id: str, card: Card) -> Card | None:
        return await self.client.add_card_to_column(column_id, card)

    async def _move(self, card: Card, column_id: str, after_card_id: str | None) -> Card:
        return await self.client.move_card(card.id, column_id, after_card_id)

    async def _delete(self, card: Card) -> None:
        await self.client.delete_card(card.id)


class DryRunCardOperations(CardOperations):
    """Plans mutations without touching GitHub.

    Created cards get placeholder ids so later moves can refer to them.
    """

    dry_run = True

    def __init__(self) -> None:
        super().__init__(client=None)
        self._next_placeholder = 1

    async def _add(self, column_id: str, card: Card) -> Card | None:
        placeholder = card.model_copy(update={"id": f"dry-run-{self._next_placeholder}"})
        self._next_placeholder += 1
        return placeholder

    async def _move(self, card: Card, column_id: str, after_card_id: str | None) -> Card:
        return card

    async def _delete(self, card: Card) -> None:
        return None


async def ensure_card_at_index(
    mirror: CardMirror,
    to_index: int,
    find_card_func: Callable[[], FindResult],
    new_card_func: Callable[[], Card],
    operations: CardOperations,
) -> Card | None:
    """Make sure the card located by ``find_card_func`` sits at ``to_index``.

    Args:
        mirror: local copy of the target column, updated in step with GitHub
        to_index: position the card must end up at
        find_card_func: locates the card in ``mirror`` -> (card, index)
        new_card_func: card to create when none is found
        operations: performs the remote calls

    Returns:
        The placed card, or None when it had to be created and GitHub
        refused it. Move failures propagate.
    """
    logger.debug(f"before ensure card at {to_index}: {mirror.describe()}")

    card, current_index = find_card_func()
    if card is None:
        card = await operations.add(mirror.column_id, new_card_func())
        if card is None:
            return None
        mirror.insert(0, card)
        current_index = 0
    else:
        logger.info(f"found card: {card.id}")

    if current_index != to_index:
        logger.info(f"card at index {current_index}, wanted at {to_index}")
        after_card_id = mirror.after_card_id(current_index, to_index)
        moved = await operations.move(card, mirror.column_id, after_card_id)
        mirror.remove(current_index)
        mirror.insert(to_index, moved)
        card = moved

    logger.debug(f"after ensure card at {to_index}: {mirror.describe()}")
    return card
