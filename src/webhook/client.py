"""HTTP client for the Jenkins relay target."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from src.config import mask_credentials
from src.webhook.errors import RequestError, RequestErrorKind
from src.webhook.models import RelayRequest, RelayResponse

logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT_MS = 5000
_JENKINS_WEBHOOK_SEGMENT = "/github-webhook/"
_JENKINS_PING_SEGMENT = "/ping"


def _parse_body(text: str) -> object:
    """Return the body as JSON when it parses, otherwise the raw text."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class JenkinsClient:
    """Sends relay requests to Jenkins and probes its reachability."""

    def __init__(self, target_url: str) -> None:
        self._target_url = target_url

    @property
    def target_url(self) -> str:
        return self._target_url

    def probe_url(self) -> str:
        """URL for the health probe: ``/github-webhook/`` swapped for ``/ping``."""
        return self._target_url.replace(_JENKINS_WEBHOOK_SEGMENT, _JENKINS_PING_SEGMENT, 1)

    async def send(self, request: RelayRequest) -> RelayResponse:
        """Issue ``request`` and return the response.

        The whole call, connect through body read, is bounded by
        ``request.timeout`` milliseconds. When it expires the call is
        cancelled and ``RequestError(TIMEOUT)`` is raised.
        """
        timeout = request.timeout / 1000 if request.timeout is not None else None
        # An explicit body of None is JSON null; an omitted body sends nothing.
        content = (
            json.dumps(request.body, allow_nan=False)
            if "body" in request.model_fields_set
            else None
        )
        headers = {str(k): str(v) for k, v in request.headers.items()}

        try:
            async with httpx.AsyncClient() as client:
                resp = await asyncio.wait_for(
                    client.request(
                        method=request.method,
                        url=request.url,
                        headers=headers,
                        content=content,
                        timeout=timeout,
                    ),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestError(RequestErrorKind.TIMEOUT, "Request timeout") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RequestError(
                RequestErrorKind.NETWORK_FAILURE,
                str(exc) or type(exc).__name__,
            ) from exc

        return RelayResponse(
            status_code=resp.status_code,
            body=_parse_body(resp.text),
            headers=dict(resp.headers),
        )

    async def health_check(self) -> bool:
        """Return True iff the probe URL answers with a 2xx or 3xx status."""
        request = RelayRequest(
            method="GET",
            url=self.probe_url(),
            headers={},
            timeout=HEALTH_CHECK_TIMEOUT_MS,
        )
        try:
            (await self.send(request)).ensure_success()
        except RequestError as exc:
            logger.warning("Jenkins health probe failed (%s): %s", exc.kind.value, exc)
            return False
        except Exception:  # a health probe reports, it never raises
            logger.exception(
                "Unexpected error probing Jenkins at %s", mask_credentials(request.url),
            )
            return False
        return True
