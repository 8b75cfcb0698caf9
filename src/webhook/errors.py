"""Error taxonomy for the webhook relay.

Every error raised while relaying a delivery derives from ``RelayError`` so
the orchestrator can convert it into a ``RelayFailure`` at one boundary.
"""

from __future__ import annotations

from enum import Enum


class RelayError(Exception):
    """Base class for faults raised while relaying a webhook."""


class ValidationError(RelayError):
    """Raised when a header record or relay request has the wrong shape."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class SignatureError(RelayError):
    """Raised when a delivery's HMAC signature does not match the secret."""

    def __init__(self, message: str = "Invalid GitHub webhook signature") -> None:
        super().__init__(message)


class RequestErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK_FAILURE = "network_failure"
    NON_SUCCESS_STATUS = "non_success_status"


class RequestError(RelayError):
    """Raised by the HTTP client when the outbound call fails."""

    def __init__(
        self,
        kind: RequestErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)


class InternalError(RelayError):
    """Raised for unexpected faults, e.g. an inbound body that is not JSON."""
