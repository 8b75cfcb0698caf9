"""FastAPI application exposing the webhook relay endpoints."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.audit.logger import AuditLogger
from src.config import RelayConfig, load_config, mask_credentials
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.proxy.body_limit import MAX_BODY_SIZE, BodySizeLimitMiddleware
from src.webhook.client import JenkinsClient
from src.webhook.errors import InternalError
from src.webhook.models import InboundWebhook, RelaySuccess
from src.webhook.relay import WebhookRelay
from src.webhook.validation import parse_payload

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads the settings file and environment."""
    config = load_config()
    audit_logger = (
        AuditLogger.from_env(config.audit_log_path) if config.audit_log_path else None
    )
    return create_app(config, audit_logger)


def create_app(
    config: RelayConfig,
    audit_logger: AuditLogger | None = None,
    client: JenkinsClient | None = None,
) -> FastAPI:
    """Create the relay FastAPI app for one inbound path and one Jenkins target."""
    app = FastAPI(docs_url=None, redoc_url=None)
    relay = WebhookRelay(config, client=client, audit_logger=audit_logger)
    masked_target = mask_credentials(config.target_jenkins_url)

    @app.post(config.webhook_path)
    async def webhook(request: Request) -> JSONResponse:
        raw_payload = await request.body()

        try:
            payload = parse_payload(raw_payload)
        except InternalError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)

        try:
            delivery = InboundWebhook(
                raw_payload=raw_payload,
                payload=payload,
                headers=dict(request.headers),
            )
            outcome = await relay.relay_delivery(
                delivery, source_ip=request.client.host if request.client else None,
            )
        except Exception as exc:  # never let one bad delivery take the worker down
            logger.exception("Unexpected error handling webhook")
            return JSONResponse(
                {"error": "Internal server error", "details": str(exc)},
                status_code=500,
            )

        if isinstance(outcome, RelaySuccess):
            return JSONResponse({
                "message": "Webhook relayed successfully",
                "jenkinsStatus": outcome.status_code,
                "jenkinsResponse": outcome.response_body,
            })
        return JSONResponse(
            {
                "error": "Failed to relay webhook to Jenkins",
                "details": outcome.error_message,
            },
            status_code=outcome.status_code or 500,
        )

    @app.get("/health")
    async def health() -> JSONResponse:
        reachable = await relay.client.health_check()
        if not reachable and audit_logger:
            try:
                audit_logger.log(AuditEvent(
                    event_type=AuditEventType.HEALTH_CHECK,
                    action="probe",
                    result="failure",
                    risk_level=RiskLevel.LOW,
                    details={"probe_url": mask_credentials(relay.client.probe_url())},
                ))
            except OSError:
                logger.exception("Failed to write health check audit event")
        return JSONResponse(
            {
                "status": "healthy" if reachable else "unhealthy",
                "relay": {
                    "targetUrl": masked_target,
                    "webhookPath": config.webhook_path,
                    "jenkins": "reachable" if reachable else "unreachable",
                },
            },
            status_code=200 if reachable else 503,
        )

    @app.get("/api/config")
    async def public_config() -> dict[str, object]:
        return config.public_view()

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=MAX_BODY_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    return app
