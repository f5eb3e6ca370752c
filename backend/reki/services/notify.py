"""
Fire-and-forget notification dispatch for live-state changes and redemptions.

Posts a JSON event to NOTIFY_WEBHOOK_URL (the notification service owns fan-out to users,
email and push). If not configured, dispatch_event no-ops. Failures are logged, never raised:
a scheduler write or a redemption has already succeeded by the time we get here.

Sends run on one small shared executor and one shared httpx.Client, so a tick that changes
many venues queues its events instead of starting a thread per event.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

import httpx

from reki.config import settings
from reki.core.constants import NOTIFY_MAX_WORKERS

logger = logging.getLogger(__name__)

EVENT_BUSYNESS_CHANGED = "busyness_changed"
EVENT_VIBE_CHANGED = "vibe_changed"
EVENT_SCENARIO_APPLIED = "scenario_applied"
EVENT_OFFER_REDEEMED = "offer_redeemed"

_lock = threading.Lock()
_executor: ThreadPoolExecutor | None = None
_client: httpx.Client | None = None


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=NOTIFY_MAX_WORKERS,
                thread_name_prefix="notify",
            )
        return _executor


def _get_client() -> httpx.Client:
    global _client
    with _lock:
        if _client is None:
            _client = httpx.Client(timeout=settings.notify_timeout_seconds)
        return _client


def shutdown_notify(wait: bool = False) -> None:
    """Stop the send executor and close the shared client (app shutdown)."""
    global _executor, _client
    with _lock:
        executor, client = _executor, _client
        _executor = _client = None
    if executor is not None:
        executor.shutdown(wait=wait, cancel_futures=not wait)
    if client is not None:
        client.close()


def send_event(
    url: str,
    kind: str,
    payload: dict[str, Any],
    *,
    transport: httpx.BaseTransport | None = None,
) -> bool:
    """
    POST one event. Returns True on 2xx, False otherwise (HTTP error or transport failure).
    With a transport, a one-off client is used instead of the shared one.
    """
    body = {
        "type": kind,
        "sent_at": datetime.now(timezone.utc).isoformat(),
        "payload": payload,
    }
    try:
        if transport is not None:
            with httpx.Client(timeout=settings.notify_timeout_seconds, transport=transport) as client:
                resp = client.post(url, json=body)
        else:
            resp = _get_client().post(url, json=body)
        if 200 <= resp.status_code < 300:
            return True
        logger.warning("Notify webhook returned %s for %s: %s", resp.status_code, kind, resp.text[:200])
        return False
    except Exception as e:
        logger.warning("Notify webhook request failed for %s: %s", kind, e, exc_info=True)
        return False


def dispatch_event(kind: str, payload: dict[str, Any]) -> None:
    """Queue the send on the shared executor so callers never wait on delivery."""
    url = settings.notify_webhook_url
    if not url:
        logger.debug("NOTIFY_WEBHOOK_URL not set; skipping %s notification", kind)
        return
    try:
        _get_executor().submit(send_event, url, kind, payload)
    except RuntimeError as e:
        # executor already shut down
        logger.warning("Could not queue %s notification: %s", kind, e)
