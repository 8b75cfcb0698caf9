"""Shared Pydantic data models for github-webhook-relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# --- Enums ---


class AuditEventType(str, Enum):
    WEBHOOK_RELAY = "webhook_relay"
    SIGNATURE_FAILURE = "signature_failure"
    VALIDATION_FAILURE = "validation_failure"
    RELAY_ERROR = "relay_error"
    HEALTH_CHECK = "health_check"


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    delivery_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "error"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
