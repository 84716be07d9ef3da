import time
from typing import Optional

import httpx

from granacred.settings import settings
from granacred.errors import GatewayError
from granacred.gateway.contract import parse_remote_result
from granacred.gateway.payloads import ACTIONS, WITHDRAW, build_request_body
from granacred.store.models import RemoteResult
from granacred.observability.logging import log
from granacred.utils.time import elapsed_ms
import granacred.observability.metrics as metrics


class WebhookGateway:
    """
    Remote Gateway: one JSON POST per action, one RemoteResult back.
    Any failure past argument checks (transport, non-2xx, non-object body)
    surfaces as GatewayError.
    """

    def __init__(self, url: Optional[str] = None, timeout_sec: Optional[float] = None):
        self.url = url or settings.WEBHOOK_URL
        self.timeout_sec = float(timeout_sec or settings.GATEWAY_TIMEOUT_SEC)

    def send(self, action: str, payload: dict) -> RemoteResult:
        if action not in ACTIONS:
            raise ValueError(f"Unknown gateway action: {action}")
        if not self.url:
            raise GatewayError(action, "WEBHOOK_URL is not set")

        body = build_request_body(action, payload)
        log(event="gateway_send_attempt", action=action, url=self.url,
            timeoutSec=self.timeout_sec, payload=payload)
        metrics.increment_attempt(action)

        t0 = time.monotonic()
        try:
            with httpx.Client(timeout=self.timeout_sec) as client:
                resp = client.post(self.url, json=body)
        except Exception as e:
            # httpx.HTTPError, but also InvalidURL and anything the transport leaks
            metrics.increment_failed(action)
            log(event="gateway_send_exception", action=action, elapsedMs=elapsed_ms(t0),
                errorType=type(e).__name__, error=str(e)[:500])
            raise GatewayError(action, f"{type(e).__name__}: {e}") from e

        ms = elapsed_ms(t0)
        metrics.record_latency(action, ms)

        if not (200 <= resp.status_code < 300):
            metrics.increment_failed(action)
            log(event="gateway_send_failed", action=action, statusCode=int(resp.status_code),
                elapsedMs=ms, responseText=(resp.text or "")[:500])
            raise GatewayError(action, f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            metrics.increment_failed(action)
            log(event="gateway_send_failed", action=action, statusCode=int(resp.status_code),
                elapsedMs=ms, reason="invalid_json")
            raise GatewayError(action, "Response is not valid JSON", status_code=resp.status_code) from e

        if not isinstance(data, dict):
            metrics.increment_failed(action)
            log(event="gateway_send_failed", action=action, statusCode=int(resp.status_code),
                elapsedMs=ms, reason="not_an_object")
            raise GatewayError(action, "Response is not a JSON object", status_code=resp.status_code)

        # withdraw answers may omit status; it is implicitly eligible
        result = parse_remote_result(data, default_status="eligible" if action == WITHDRAW else None)
        metrics.increment_ok(action)
        metrics.increment_outcome(result.status.value)
        log(event="gateway_send_success", action=action, statusCode=int(resp.status_code),
            elapsedMs=ms, status=result.status.value, hasFormalization=result.has_formalization)
        return result
