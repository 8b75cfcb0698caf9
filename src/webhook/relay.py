"""Webhook relay pipeline.

Takes one GitHub delivery through a single pass:

1. Header validation
2. Signature check over the raw body
3. Outbound request construction and validation
4. Forward to Jenkins via httpx
5. Audit log

Every exit path returns a ``RelayOutcome``; no exception escapes ``relay``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.client import JenkinsClient
from src.webhook.errors import RelayError, RequestError, SignatureError, ValidationError
from src.webhook.github import summarize_delivery
from src.webhook.models import (
    InboundWebhook,
    RelayFailure,
    RelayOutcome,
    RelayStage,
    RelaySuccess,
    WebhookHeaders,
)
from src.webhook.signature import validate_signature
from src.webhook.validation import validate_headers, validate_relay_request

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.config import RelayConfig

logger = logging.getLogger(__name__)

RELAY_USER_AGENT = "GitHub-Webhook-Relay/1.0"
RELAY_TIMEOUT_MS = 30000


class WebhookRelay:
    """Validates a GitHub delivery and forwards it to the configured Jenkins URL."""

    def __init__(
        self,
        config: RelayConfig,
        client: JenkinsClient | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._config = config
        self._client = client or JenkinsClient(config.target_jenkins_url)
        self._audit = audit_logger

    @property
    def client(self) -> JenkinsClient:
        return self._client

    async def relay_delivery(
        self, delivery: InboundWebhook, source_ip: str | None = None,
    ) -> RelayOutcome:
        return await self.relay(
            delivery.payload, delivery.headers, delivery.raw_payload, source_ip=source_ip,
        )

    async def relay(
        self,
        payload: Any,
        headers: Mapping[str, str],
        raw_payload: bytes,
        source_ip: str | None = None,
    ) -> RelayOutcome:
        """Run the relay pipeline for one delivery."""
        stage = RelayStage.RECEIVED
        validated: WebhookHeaders | None = None
        try:
            # Stage 1: Header validation
            try:
                validated = validate_headers(headers)
            except ValidationError as e:
                return self._fail(
                    f"Invalid webhook headers: {e}",
                    stage,
                    AuditEventType.VALIDATION_FAILURE,
                    status_code=400,
                    source_ip=source_ip,
                )
            stage = RelayStage.HEADERS_VALIDATED

            # Stage 2: Signature check over the exact bytes received
            if not validate_signature(
                raw_payload, validated.signature_256, self._config.github_webhook_secret,
            ):
                raise SignatureError()
            stage = RelayStage.SIGNATURE_CHECKED

            # Stage 3: Build and validate the outbound request
            try:
                request = validate_relay_request({
                    "method": "POST",
                    "url": self._config.target_jenkins_url,
                    "headers": {
                        "Content-Type": "application/json",
                        "X-GitHub-Event": validated.event or "unknown",
                        "X-GitHub-Delivery": validated.delivery or "",
                        "User-Agent": RELAY_USER_AGENT,
                    },
                    "body": payload,
                    "timeout": RELAY_TIMEOUT_MS,
                })
            except ValidationError as e:
                return self._fail(
                    f"Invalid relay request: {e}",
                    stage,
                    AuditEventType.VALIDATION_FAILURE,
                    validated=validated,
                    source_ip=source_ip,
                )

            # Stage 4: Forward to Jenkins
            response = await self._client.send(request)
            stage = RelayStage.RELAYED
        except SignatureError as e:
            return self._fail(
                str(e),
                stage,
                AuditEventType.SIGNATURE_FAILURE,
                status_code=401,
                validated=validated,
                source_ip=source_ip,
            )
        except RequestError as e:
            return self._fail(
                str(e),
                stage,
                AuditEventType.RELAY_ERROR,
                validated=validated,
                source_ip=source_ip,
                details={"kind": e.kind.value},
            )
        except RelayError as e:
            return self._fail(
                str(e), stage, AuditEventType.RELAY_ERROR,
                validated=validated, source_ip=source_ip,
            )
        except Exception as e:  # unexpected faults still become an outcome
            logger.exception("Webhook relay error")
            return self._fail(
                str(e) or "Unknown error occurred",
                stage,
                AuditEventType.RELAY_ERROR,
                validated=validated,
                source_ip=source_ip,
            )

        # Stage 5: Audit log
        summary = summarize_delivery(validated.event, payload)
        logger.info(
            "Relayed %s delivery %s to Jenkins (status %d)",
            summary["event"], validated.delivery or "-", response.status_code,
        )
        self._record(AuditEvent(
            event_type=AuditEventType.WEBHOOK_RELAY,
            source_ip=source_ip,
            delivery_id=validated.delivery,
            action="relay",
            result="success",
            risk_level=RiskLevel.INFO,
            details={**summary, "jenkins_status": response.status_code},
        ))
        return RelaySuccess(status_code=response.status_code, response_body=response.body)

    def _fail(
        self,
        message: str,
        stage: RelayStage,
        event_type: AuditEventType,
        status_code: int | None = None,
        validated: WebhookHeaders | None = None,
        source_ip: str | None = None,
        details: dict[str, object] | None = None,
    ) -> RelayFailure:
        delivery_id = validated.delivery if validated else None
        logger.warning(
            "Webhook relay failed at %s (delivery %s): %s",
            stage.value, delivery_id or "-", message,
        )
        if event_type == AuditEventType.SIGNATURE_FAILURE:
            risk = RiskLevel.HIGH
        else:
            risk = RiskLevel.MEDIUM
        self._record(AuditEvent(
            event_type=event_type,
            source_ip=source_ip,
            delivery_id=delivery_id,
            action="relay",
            result="failure",
            risk_level=risk,
            details={"stage": stage.value, "error": message, **(details or {})},
        ))
        return RelayFailure(error_message=message, status_code=status_code, stage=stage)

    def _record(self, event: AuditEvent) -> None:
        if not self._audit:
            return
        try:
            self._audit.log(event)
        except OSError:
            logger.exception("Failed to write audit event %s", event.event_type.value)
