"""Sample GitHub REST API payloads for testing."""

from typing import Any


def create_pr_payload(
    pr_id: int = 1001,
    number: int = 42,
    title: str = "Add new feature",
    draft: bool = False,
    user_id: int = 12345,
    login: str = "testuser",
    user_type: str = "User",
    labels: tuple[str, ...] = (),
    repo_name: str = "repo",
    owner: str = "owner",
    private: bool = False,
    created_at: str = "2026-10-12T09:30:00Z",
    **overrides: Any,
) -> dict[str, Any]:
    """Create an element of the ``GET /repos/{repo}/pulls`` response."""
    repo = {
        "id": 987654321,
        "name": repo_name,
        "full_name": f"{owner}/{repo_name}",
        "private": private,
    }
    payload: dict[str, Any] = {
        "id": pr_id,
        "number": number,
        "state": "open",
        "title": title,
        "draft": draft,
        "user": {"login": login, "id": user_id, "type": user_type},
        "labels": [{"id": index, "name": name} for index, name in enumerate(labels)],
        "created_at": created_at,
        "url": f"https://api.github.com/repos/{owner}/{repo_name}/pulls/{number}",
        "html_url": f"https://github.com/{owner}/{repo_name}/pull/{number}",
        "head": {"ref": "feature-branch", "sha": "abc123", "repo": dict(repo)},
        "base": {"ref": "main", "sha": "def456", "repo": dict(repo)},
    }
    payload.update(overrides)
    return payload


def create_review_payload(
    review_id: int = 5001,
    state: str = "COMMENTED",
    login: str = "reviewer",
    user_id: int = 777,
) -> dict[str, Any]:
    """Create an element of the ``GET .../pulls/{number}/reviews`` response."""
    return {
        "id": review_id,
        "state": state,
        "user": {"login": login, "id": user_id, "type": "User"},
        "body": "",
        "submitted_at": "2026-10-13T10:00:00Z",
    }
