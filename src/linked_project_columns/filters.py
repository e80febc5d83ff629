"""Card filters applied to source and target columns.

Every filter takes a list of cards and returns a new list with the surviving
cards in their original relative order. Filters are built from an
``ActionConfig`` and chained with ``apply_filters``.
"""

import logging
import re
from collections.abc import Callable
from functools import reduce

from .config import ActionConfig
from .models import Card, ConfigurationError

logger = logging.getLogger(__name__)

IGNORE_COMMENT = "<!-- mirror ignore -->"

CardFilter = Callable[[list[Card]], list[Card]]


def apply_filters(cards: list[Card], filters: list[CardFilter]) -> list[Card]:
    """Apply ``filters`` left to right. ``cards`` itself is not mutated."""
    return reduce(lambda result, card_filter: card_filter(result), filters, list(cards))


def type_filter(type_name: str) -> CardFilter:
    """Keep only note cards (``note``), content cards (``content``) or all."""

    def filter_by_type(cards: list[Card]) -> list[Card]:
        if type_name == "note":
            return [card for card in cards if card.note]
        if type_name == "content":
            return [card for card in cards if card.content is not None]
        if type_name:
            logger.warning(f"cannot apply unknown type_filter {type_name}")
        return cards

    return filter_by_type


def content_filter(patterns: list[str]) -> CardFilter:
    """Keep cards whose title or note matches any pattern, case-insensitively."""
    try:
        matchers = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]
    except re.error as err:
        raise ConfigurationError(f"Invalid content_filter expression: {err}") from err

    def filter_by_content(cards: list[Card]) -> list[Card]:
        if not matchers:
            return cards
        kept = []
        for card in cards:
            # notes without text cannot be filtered by content
            if card.content is None and not card.note:
                kept.append(card)
            elif any(m.search(card.display_text) for m in matchers):
                kept.append(card)
        return kept

    return filter_by_content


def label_filter(label_names: list[str]) -> CardFilter:
    """Keep content cards carrying at least one of ``label_names``.

    Notes have no labels and always pass.
    """
    wanted = set(label_names)

    def filter_by_label(cards: list[Card]) -> list[Card]:
        if not wanted:
            return cards
        return [
            card for card in cards
            if card.content is None or any(label.name in wanted for label in card.content.labels)
        ]

    return filter_by_label


def state_filter(state: str) -> CardFilter:
    """Keep content cards in ``state`` (e.g. ``open``); notes always pass."""
    wanted = state.upper()

    def filter_by_state(cards: list[Card]) -> list[Card]:
        if not wanted:
            return cards
        return [card for card in cards if card.content is None or card.content.state.upper() == wanted]

    return filter_by_state


def filter_ignored(cards: list[Card]) -> list[Card]:
    """Drop cards whose note or linked body contains the ignore comment."""
    kept = []
    for card in cards:
        if card.note:
            if IGNORE_COMMENT in card.note:
                continue
        elif card.content is not None and card.content.body:
            if IGNORE_COMMENT in card.content.body:
                continue
        kept.append(card)
    return kept


def build_source_filters(config: ActionConfig) -> list[CardFilter]:
    """Full chain for source columns: type, content, label, state, ignore."""
    return [
        type_filter(config.type_filter),
        content_filter(config.content_filters),
        label_filter(config.label_filters),
        state_filter(config.state_filter),
        filter_ignored,
    ]


# The target column only drops ignored cards
TARGET_FILTERS: list[CardFilter] = [filter_ignored]
