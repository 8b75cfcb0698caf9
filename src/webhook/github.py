"""GitHub webhook payload models used to summarize deliveries for logs.

The relay forwards payloads untouched; these models only pull out the few
fields worth recording (repository, ref, action, sender).
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class GitHubUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    login: str
    avatar_url: str | None = None
    html_url: str | None = None


class GitHubRepository(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_name: str
    private: bool = False
    html_url: str | None = None
    clone_url: str | None = None
    ssh_url: str | None = None
    default_branch: str | None = None


class GitHubCommitAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    username: str | None = None


class GitHubCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    message: str
    timestamp: str
    url: str
    author: GitHubCommitAuthor
    committer: GitHubCommitAuthor


class GitHubPushPayload(BaseModel):
    ref: str
    before: str
    after: str
    repository: GitHubRepository
    sender: GitHubUser
    commits: list[GitHubCommit] = []
    head_commit: GitHubCommit | None = None
    compare: str | None = None
    forced: bool | None = None
    deleted: bool | None = None
    created: bool | None = None


class GitHubPullRequestRef(BaseModel):
    ref: str
    sha: str


class GitHubPullRequest(BaseModel):
    id: int
    number: int
    state: str
    title: str
    html_url: str | None = None
    head: GitHubPullRequestRef
    base: GitHubPullRequestRef
    user: GitHubUser
    merged: bool | None = None


class GitHubPullRequestPayload(BaseModel):
    action: str
    number: int
    pull_request: GitHubPullRequest
    repository: GitHubRepository
    sender: GitHubUser


def _generic_summary(payload: dict[str, Any]) -> dict[str, Any]:
    summary: dict[str, Any] = {}
    repo = payload.get("repository")
    if isinstance(repo, dict) and isinstance(repo.get("full_name"), str):
        summary["repository"] = repo["full_name"]
    sender = payload.get("sender")
    if isinstance(sender, dict) and isinstance(sender.get("login"), str):
        summary["sender"] = sender["login"]
    if isinstance(payload.get("action"), str):
        summary["action"] = payload["action"]
    return summary


def summarize_delivery(event: str | None, payload: Any) -> dict[str, Any]:
    """Return a short summary of a delivery for logging. Never raises."""
    summary: dict[str, Any] = {"event": event or "unknown"}
    if not isinstance(payload, dict):
        return summary

    try:
        if event == "push":
            push = GitHubPushPayload.model_validate(payload)
            summary.update({
                "repository": push.repository.full_name,
                "ref": push.ref,
                "after": push.after,
                "commits": len(push.commits),
                "sender": push.sender.login,
            })
            return summary
        if event == "pull_request":
            pr = GitHubPullRequestPayload.model_validate(payload)
            summary.update({
                "repository": pr.repository.full_name,
                "action": pr.action,
                "number": pr.number,
                "head": pr.pull_request.head.ref,
                "base": pr.pull_request.base.ref,
                "sender": pr.sender.login,
            })
            return summary
    except pydantic.ValidationError as exc:
        logger.debug("Payload for %s event did not match its model: %s", event, exc)

    summary.update(_generic_summary(payload))
    return summary
