"""Data models and exceptions for GitHub project column mirroring."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class _GraphQLModel(BaseModel):
    """Base for models parsed from GraphQL payloads (camelCase aliases)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Label(_GraphQLModel):
    """A label attached to an issue or pull request."""

    name: str


class CardContent(_GraphQLModel):
    """Issue or pull request linked to a project card."""

    id: str
    title: str = ""
    state: str = ""
    body: str = ""
    labels: list[Label] = Field(default_factory=list)

    @field_validator("labels", mode="before")
    @classmethod
    def _flatten_label_nodes(cls, value: Any) -> Any:
        # GraphQL delivers connections as {"nodes": [...]}
        if isinstance(value, dict):
            return value.get("nodes") or []
        return value or []

    @field_validator("title", "state", "body", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Card(_GraphQLModel):
    """A project card: either linked content or a free-text note.

    Exactly one of ``content`` / ``note`` is populated for cards coming from
    GitHub. Synthetic notes built locally have no ``id`` until created.
    """

    id: str | None = None
    note: str | None = None
    content: CardContent | None = None

    @classmethod
    def from_note(cls, text: str) -> "Card":
        return cls(note=text)

    @property
    def is_content(self) -> bool:
        return self.content is not None

    @property
    def display_text(self) -> str | None:
        """Title for content cards, note text for note cards."""
        if self.content is not None:
            return self.content.title
        return self.note

    def payload(self) -> dict[str, str | None]:
        """Variables used to create an equivalent card in another column."""
        if self.content is not None:
            return {"contentId": self.content.id}
        return {"note": self.note}


class PageInfo(_GraphQLModel):
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class CardConnection(_GraphQLModel):
    nodes: list[Card] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class ProjectRef(_GraphQLModel):
    name: str
    url: str | None = None


class ProjectColumn(_GraphQLModel):
    """A project column and the (possibly partial) list of its cards."""

    id: str
    name: str
    url: str = ""
    project: ProjectRef
    cards: CardConnection = Field(default_factory=CardConnection)


class APIConfiguration(BaseModel):
    """Transport settings for the GitHub GraphQL API."""

    api_key: SecretStr
    base_url: str = "https://api.github.com/graphql"
    timeout: float = 30.0
    # Seconds slept before every remote call
    request_delay: float = 0.0


class ColumnSyncError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ColumnSyncError):
    """Missing or invalid action input."""


class GitHubAPIError(ColumnSyncError):
    """A remote call to the GitHub API failed."""


class AuthenticationError(GitHubAPIError):
    """The token was rejected."""


class RateLimitError(GitHubAPIError):
    """GitHub rate limit was hit."""

    def __init__(self, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after is not None:
            message += f", retry after {retry_after}s"
        super().__init__(message)


class NetworkError(GitHubAPIError):
    """Transport failure or unexpected HTTP status."""


class RequestTimeoutError(GitHubAPIError):
    """A request did not complete within the configured timeout."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Request timed out: {operation}")


class GraphQLError(GitHubAPIError):
    """The GraphQL endpoint answered with an ``errors`` array."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = [str(e.get("message", e)) for e in errors] or ["Unknown GraphQL error"]
        super().__init__("; ".join(messages))


class ColumnNotFoundError(GitHubAPIError):
    """A column id did not resolve to a project column."""

    def __init__(self, column_id: str) -> None:
        self.column_id = column_id
        super().__init__(f"Could not resolve project column: {column_id}")
