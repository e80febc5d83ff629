"""
Shared pytest fixtures for all tests.

Provides an in-memory GitHub GraphQL endpoint served through
httpx.MockTransport, plus helpers to build cards, columns and configs.
"""

import copy
import json
import logging
from typing import Any, Callable

import httpx
import pytest
from pydantic import SecretStr

from linked_project_columns.client import queries
from linked_project_columns.client.api_client import ProjectColumnsClient
from linked_project_columns.config import ActionConfig
from linked_project_columns.models import APIConfiguration

GRAPHQL_URL = "https://api.github.com/graphql"

MUTATIONS = {
    queries.ADD_PROJECT_CARD: "add",
    queries.MOVE_PROJECT_CARD: "move",
    queries.DELETE_PROJECT_CARD: "delete",
}


# =============================================================================
# CARD / COLUMN BUILDERS
# =============================================================================

def note_card(card_id: str, note: str) -> dict[str, Any]:
    return {"id": card_id, "note": note, "content": None}


def content_card(
    card_id: str,
    content_id: str,
    title: str = "",
    state: str = "OPEN",
    body: str = "",
    labels: tuple[str, ...] = (),
) -> dict[str, Any]:
    return {
        "id": card_id,
        "note": None,
        "content": {
            "id": content_id,
            "title": title,
            "state": state,
            "body": body,
            "labels": {"nodes": [{"name": name} for name in labels]},
        },
    }


def column_info(column_id: str, name: str, project: str = "source project") -> dict[str, Any]:
    return {
        "id": column_id,
        "name": name,
        "url": f"https://github.com/orgs/octo/projects/1/columns/{column_id}",
        "project": {"name": project, "url": "https://github.com/orgs/octo/projects/1"},
    }


# =============================================================================
# FAKE GITHUB
# =============================================================================

class FakeGitHub:
    """Stateful stand-in for the GitHub GraphQL API.

    Columns hold real card lists; adds insert at the top, moves place a card
    after another one, deletes remove it. Every request is recorded in
    ``calls`` as (query, variables).
    """

    def __init__(self, page_size: int = 50):
        self.page_size = page_size
        self.columns: dict[str, dict[str, Any]] = {}
        self.cards: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.next_card_id = 200
        self.reject_add: Callable[[dict[str, Any]], bool] | None = None
        self.fail_move = False

        self.add_column("1", "source column")
        self.add_column("2", "target column", project="target project")

    def add_column(self, column_id: str, name: str, project: str = "source project", cards=()) -> None:
        self.columns[column_id] = column_info(column_id, name, project)
        self.cards[column_id] = [copy.deepcopy(c) for c in cards]

    def set_cards(self, column_id: str, *cards: dict[str, Any]) -> None:
        self.cards[column_id] = [copy.deepcopy(c) for c in cards]

    # --- inspection -------------------------------------------------------

    def mutations(self) -> list[tuple[str, dict[str, Any]]]:
        return [(MUTATIONS[q], v) for q, v in self.calls if q in MUTATIONS]

    def queries_made(self) -> list[tuple[str, dict[str, Any]]]:
        return [(q, v) for q, v in self.calls if q not in MUTATIONS]

    def identities(self, column_id: str) -> list[str | None]:
        """Note text for note cards, content id for content cards."""
        return [c["note"] if c["note"] is not None else c["content"]["id"] for c in self.cards[column_id]]

    def ids(self, column_id: str) -> list[str]:
        return [c["id"] for c in self.cards[column_id]]

    # --- transport --------------------------------------------------------

    def _page(self, column_id: str, after: str | None) -> dict[str, Any] | None:
        if column_id not in self.columns:
            return None
        offset = int(after.split("-")[1]) if after else 0
        cards = self.cards[column_id]
        end = offset + self.page_size
        column = copy.deepcopy(self.columns[column_id])
        column["cards"] = {
            "nodes": copy.deepcopy(cards[offset:end]),
            "pageInfo": {
                "hasNextPage": end < len(cards),
                "endCursor": f"cursor-{end}" if cards[offset:end] else None,
            },
        }
        return column

    def _column_of(self, card_id: str) -> list[dict[str, Any]]:
        for cards in self.cards.values():
            if any(c["id"] == card_id for c in cards):
                return cards
        raise KeyError(card_id)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        query, variables = body["query"], body["variables"]
        self.calls.append((query, copy.deepcopy(variables)))

        if query == queries.GET_PROJECT_COLUMNS:
            data = {
                "sourceColumns": [self._page(cid, None) for cid in variables["sourceColumnIds"]],
                "targetColumn": self._page(variables["targetColumnId"], None),
            }
        elif query == queries.GET_SINGLE_PROJECT_COLUMN:
            data = {"column": self._page(variables["id"], variables["after"])}
        elif query == queries.ADD_PROJECT_CARD:
            if self.reject_add and self.reject_add(variables):
                return httpx.Response(200, json={"errors": [{"message": "Project already has the associated issue"}]})
            card_id = str(self.next_card_id)
            self.next_card_id += 1
            if variables.get("contentId"):
                source = self._find_content(variables["contentId"])
                card = {"id": card_id, "note": None, "content": source}
            else:
                card = note_card(card_id, variables.get("note"))
            self.cards[variables["columnId"]].insert(0, card)
            data = {"addProjectCard": {"cardEdge": {"node": copy.deepcopy(card)}}}
        elif query == queries.MOVE_PROJECT_CARD:
            if self.fail_move:
                return httpx.Response(502, json={"message": "Bad gateway"})
            cards = self.cards[variables["columnId"]]
            index = next(i for i, c in enumerate(cards) if c["id"] == variables["cardId"])
            card = cards.pop(index)
            after = variables["afterCardId"]
            position = 0 if after is None else next(i for i, c in enumerate(cards) if c["id"] == after) + 1
            cards.insert(position, card)
            data = {"moveProjectCard": {"cardEdge": {"node": copy.deepcopy(card)}}}
        elif query == queries.DELETE_PROJECT_CARD:
            cards = self._column_of(variables["cardId"])
            cards[:] = [c for c in cards if c["id"] != variables["cardId"]]
            data = {"deleteProjectCard": {"deletedCardId": variables["cardId"]}}
        else:
            return httpx.Response(400, json={"message": "unknown query"})

        return httpx.Response(200, json={"data": data})

    def _find_content(self, content_id: str) -> dict[str, Any]:
        for cards in self.cards.values():
            for card in cards:
                if card["content"] and card["content"]["id"] == content_id:
                    return copy.deepcopy(card["content"])
        return {"id": content_id, "title": "", "state": "OPEN", "body": "", "labels": {"nodes": []}}


def make_client(fake: FakeGitHub, config: APIConfiguration | None = None) -> ProjectColumnsClient:
    api_config = config or APIConfiguration(api_key=SecretStr("token"), base_url=GRAPHQL_URL)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return ProjectColumnsClient(api_config, http_client=http_client)


def make_config(**overrides: Any) -> ActionConfig:
    values: dict[str, Any] = {
        "source_column_ids": ["1"],
        "target_column_id": "2",
        "github_token": SecretStr("token"),
    }
    values.update(overrides)
    return ActionConfig(**values)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(fake_github: FakeGitHub) -> ProjectColumnsClient:
    return make_client(fake_github)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by setup_logging so they don't outlive a test."""
    package_logger = logging.getLogger("linked_project_columns")
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if getattr(handler, "_linked_columns_handler", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
