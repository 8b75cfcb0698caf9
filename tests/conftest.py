"""Shared test fixtures for github-webhook-relay."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.audit.logger import AuditLogger
from src.config import RelayConfig

TARGET_URL = "http://jenkins.local:8080/github-webhook/"
SECRET = "It's a Secret to Everybody"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> RelayConfig:
    """Factory for RelayConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "target_jenkins_url": TARGET_URL,
        "webhook_path": "/webhook",
        "incoming_port": 8008,
        "github_webhook_secret": None,
    }
    defaults.update(kwargs)
    return RelayConfig(**defaults)


def make_push_payload(**kwargs: Any) -> dict[str, Any]:
    """Factory for a minimal GitHub push delivery."""
    user = {"id": 1, "login": "octocat", "avatar_url": "", "html_url": ""}
    payload: dict[str, Any] = {
        "ref": "refs/heads/main",
        "before": "0" * 40,
        "after": "a" * 40,
        "repository": {
            "id": 42,
            "name": "hello-world",
            "full_name": "octocat/hello-world",
            "private": False,
            "html_url": "https://github.com/octocat/hello-world",
            "clone_url": "https://github.com/octocat/hello-world.git",
            "ssh_url": "git@github.com:octocat/hello-world.git",
        },
        "pusher": user,
        "sender": user,
        "commits": [],
        "compare": "https://github.com/octocat/hello-world/compare/x...y",
    }
    payload.update(kwargs)
    return payload


def make_mock_upstream(
    status_code: int = 200,
    content: bytes = b'{"queued": true}',
    headers: dict[str, str] | None = None,
) -> AsyncMock:
    """Create a mock httpx.AsyncClient context manager with a preset response."""
    resp_headers = headers or {"content-type": "application/json"}
    fake_response = httpx.Response(
        status_code=status_code,
        content=content,
        headers=resp_headers,
    )

    mock_instance = AsyncMock()
    mock_instance.request = AsyncMock(return_value=fake_response)
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    return mock_instance
