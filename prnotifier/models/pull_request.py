"""Pull request model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def _require(payload: dict[str, Any], key: str, expected: type | tuple[type, ...]) -> Any:
    """Fetch a field from an API payload and check its type.

    Raises:
        KeyError: If the field is missing.
        TypeError: If the field has the wrong type.
    """
    value = payload[key]
    types = expected if isinstance(expected, tuple) else (expected,)
    # bool is a subclass of int and is only accepted where asked for
    if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
        raise TypeError(f"Field '{key}' must be {expected}, got {type(value).__name__}")
    return value


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 API timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclass(frozen=True)
class User:
    """A GitHub account, either a person or an automation."""

    id: int
    login: str
    type: str = "User"

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> User:
        return cls(
            id=_require(payload, "id", int),
            login=_require(payload, "login", str),
            type=payload.get("type") or "User",
        )

    @property
    def is_bot(self) -> bool:
        """Whether the account is an automated (bot) account."""
        return self.type == "Bot"

    @property
    def identifiers(self) -> frozenset[str]:
        """Values that may name this user in configured user lists."""
        return frozenset({str(self.id), self.login})


@dataclass(frozen=True)
class Label:
    """A label attached to a pull request."""

    name: str

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> Label:
        return cls(name=_require(payload, "name", str))


@dataclass(frozen=True)
class Repository:
    """The repository owning a pull request's source branch."""

    name: str
    full_name: str
    private: bool = False

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> Repository:
        return cls(
            name=_require(payload, "name", str),
            full_name=_require(payload, "full_name", str),
            private=_require(payload, "private", bool),
        )

    @property
    def visibility(self) -> str:
        """Visibility tag used to annotate log records."""
        return "private" if self.private else "public"


@dataclass(frozen=True)
class PullRequest:
    """An open GitHub pull request as returned by the list endpoint."""

    id: int
    number: int
    title: str
    user: User
    draft: bool
    created_at: datetime
    url: str
    html_url: str
    head_repository: Repository
    base_repository: str
    labels: tuple[Label, ...] = field(default_factory=tuple)
    # Only the single pull request endpoint reports line counts; the list
    # endpoint leaves them out and they stay None.
    additions: int | None = None
    deletions: int | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")

        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> PullRequest:
        """Create a PullRequest from a GitHub REST API pull request object.

        Args:
            payload: One element of the ``GET /repos/{repo}/pulls`` response.

        Returns:
            PullRequest instance.

        Raises:
            KeyError: If required fields are missing.
            TypeError: If fields have unexpected types.
            ValueError: If field values are invalid.
        """
        base = _require(payload, "base", dict)
        base_repo = Repository.from_api_payload(_require(base, "repo", dict))

        # head.repo is null when the fork behind the PR has been deleted
        head = _require(payload, "head", dict)
        head_repo_payload = head.get("repo")
        head_repo = (
            Repository.from_api_payload(head_repo_payload)
            if head_repo_payload is not None
            else base_repo
        )

        additions = payload.get("additions")
        deletions = payload.get("deletions")
        if additions is not None:
            additions = _require(payload, "additions", int)
        if deletions is not None:
            deletions = _require(payload, "deletions", int)

        return cls(
            id=_require(payload, "id", int),
            number=_require(payload, "number", int),
            title=_require(payload, "title", str),
            user=User.from_api_payload(_require(payload, "user", dict)),
            draft=_require(payload, "draft", bool),
            created_at=parse_timestamp(_require(payload, "created_at", str)),
            url=_require(payload, "url", str),
            html_url=_require(payload, "html_url", str),
            head_repository=head_repo,
            base_repository=base_repo.full_name,
            labels=tuple(
                Label.from_api_payload(label) for label in _require(payload, "labels", list)
            ),
            additions=additions,
            deletions=deletions,
        )

    @property
    def label_names(self) -> frozenset[str]:
        """Names of all labels on the pull request."""
        return frozenset(label.name for label in self.labels)

    @property
    def visibility(self) -> str:
        """Visibility of the source repository."""
        return self.head_repository.visibility

    @property
    def reference(self) -> str:
        """Short reference combining repository name and PR number."""
        return f"{self.head_repository.name}#{self.number}"
