"""Pull request review model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from prnotifier.models.pull_request import User


class ReviewState(str, Enum):
    """Known states of a submitted pull request review."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


@dataclass(frozen=True)
class Review:
    """A review left on a pull request.

    ``state`` keeps the raw API value so states added by GitHub later are
    carried through and count as not approved.
    """

    id: int
    state: str
    user: User | None = None

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> Review:
        """Create a Review from a GitHub REST API review object.

        Raises:
            KeyError: If required fields are missing.
            TypeError: If the id is not an integer or the state not a string.
        """
        review_id = payload["id"]
        if isinstance(review_id, bool) or not isinstance(review_id, int):
            raise TypeError(f"Review id must be int, got {type(review_id).__name__}")

        state = payload["state"]
        if not isinstance(state, str):
            raise TypeError(f"Review state must be str, got {type(state).__name__}")

        # Reviews by deleted accounts have a null user
        user_payload = payload.get("user")

        return cls(
            id=review_id,
            state=state,
            user=User.from_api_payload(user_payload) if user_payload else None,
        )

    @property
    def is_approval(self) -> bool:
        return self.state == ReviewState.APPROVED.value
