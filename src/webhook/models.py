"""Data models for the webhook relay pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

from src.webhook.errors import RequestError, RequestErrorKind

# --- Boundary records (validated once, then passed as typed values) ---


class WebhookHeaders(BaseModel):
    """GitHub delivery headers the relay cares about. Unknown headers are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    event: StrictStr | None = Field(default=None, alias="x-github-event")
    delivery: StrictStr | None = Field(default=None, alias="x-github-delivery")
    signature_256: StrictStr | None = Field(default=None, alias="x-hub-signature-256")
    user_agent: StrictStr | None = Field(default=None, alias="user-agent")
    content_type: StrictStr | None = Field(default=None, alias="content-type")


class RelayRequest(BaseModel):
    """Outbound HTTP request to the relay target."""

    model_config = ConfigDict(frozen=True)

    method: StrictStr
    url: StrictStr
    headers: dict[str, Any]
    body: Any = None  # only sent when supplied; see model_fields_set
    timeout: StrictInt | StrictFloat | None = None  # milliseconds


@dataclass
class InboundWebhook:
    """One inbound delivery: exact body bytes, parsed JSON and raw headers."""

    raw_payload: bytes
    payload: Any
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class RelayResponse:
    """Response from the relay target; ``body`` is parsed JSON or raw text."""

    status_code: int
    body: Any
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def ensure_success(self) -> RelayResponse:
        if not self.ok:
            raise RequestError(
                RequestErrorKind.NON_SUCCESS_STATUS,
                f"Unexpected status code {self.status_code}",
                status_code=self.status_code,
            )
        return self


# --- Outcome ---


class RelayStage(str, Enum):
    """Progress through the pipeline. The terminal states are RelaySuccess and RelayFailure."""

    RECEIVED = "received"
    HEADERS_VALIDATED = "headers_validated"
    SIGNATURE_CHECKED = "signature_checked"
    RELAYED = "relayed"


@dataclass(frozen=True)
class RelaySuccess:
    status_code: int
    response_body: Any


@dataclass(frozen=True)
class RelayFailure:
    error_message: str
    status_code: int | None = None
    stage: RelayStage = RelayStage.RECEIVED  # last stage reached before failing


RelayOutcome = Union[RelaySuccess, RelayFailure]
