"""Relay configuration: a JSON settings file plus environment overrides."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

DEFAULT_CONFIG_PATH = "serverConfig.json"

# Environment variable -> settings file key
_ENV_OVERRIDES = {
    "TARGET_JENKINS_URL": "targetJenkinsUrl",
    "WEBHOOK_PATH": "webhookPath",
    "INCOMING_PORT": "incomingPort",
    "GITHUB_WEBHOOK_SECRET": "githubWebhookSecret",
    "AUDIT_LOG_PATH": "auditLogPath",
    "CORS_ORIGINS": "corsOrigins",
}

# The password runs to the last "@" before the path, so it may itself hold "@".
_CREDENTIALS_RE = re.compile(r"//[^/@]*:[^/]*@")


class ConfigError(Exception):
    """Raised when the relay configuration is missing or malformed."""


class RelayConfig(BaseModel):
    """Immutable process-wide settings, built once at startup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    target_jenkins_url: StrictStr = Field(alias="targetJenkinsUrl")
    webhook_path: StrictStr = Field(default="/webhook", alias="webhookPath")
    incoming_port: StrictInt = Field(default=8008, alias="incomingPort", ge=1, le=65535)
    github_webhook_secret: StrictStr | None = Field(default=None, alias="githubWebhookSecret")
    audit_log_path: StrictStr | None = Field(default=None, alias="auditLogPath")
    cors_origins: tuple[StrictStr, ...] = Field(default=("*",), alias="corsOrigins")

    @property
    def has_webhook_secret(self) -> bool:
        return bool(self.github_webhook_secret)

    def public_view(self) -> dict[str, Any]:
        """Non-secret settings, with credentials in the target URL masked."""
        return {
            "targetJenkinsUrl": mask_credentials(self.target_jenkins_url),
            "webhookPath": self.webhook_path,
            "hasWebhookSecret": self.has_webhook_secret,
            "incomingPort": self.incoming_port,
        }


def mask_credentials(url: str) -> str:
    """Replace ``//user:pass@`` in a URL with ``//***:***@``."""
    return _CREDENTIALS_RE.sub("//***:***@", url)


def _env_values() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, key in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        if key == "incomingPort":
            try:
                values[key] = int(raw)
            except ValueError as e:
                raise ConfigError(f"{env_name} must be an integer, got {raw!r}") from e
        elif key == "corsOrigins":
            values[key] = [origin.strip() for origin in raw.split(",") if origin.strip()]
        else:
            values[key] = raw
    return values


def build_config(values: dict[str, Any]) -> RelayConfig:
    """Validate raw settings into a RelayConfig, raising ConfigError on failure."""
    try:
        return RelayConfig.model_validate(values)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigError(f"Invalid configuration field '{field}': {first['msg']}") from e


def load_config(path: str | None = None) -> RelayConfig:
    """Load settings from a JSON file, then apply environment overrides.

    The file path defaults to ``RELAY_CONFIG_PATH`` or ``serverConfig.json``.
    A missing file is allowed when the environment supplies every required key.
    """
    config_path = Path(path or os.environ.get("RELAY_CONFIG_PATH", DEFAULT_CONFIG_PATH))
    values: dict[str, Any] = {}
    if config_path.exists():
        try:
            raw = json.loads(config_path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")
        values.update(raw)
    values.update(_env_values())
    return build_config(values)
