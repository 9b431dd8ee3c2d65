"""Best-effort lock confirmation notifications."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

import httpx

from ..config import settings
from ..models.domain import Territory

logger = logging.getLogger(__name__)


class LockNotifier:
    """Sends confirmations on a background pool so callers never wait on them."""

    def __init__(
        self,
        webhook_url: str | None = None,
        timeout: float | None = None,
        max_workers: int = 2,
    ) -> None:
        self.webhook_url = webhook_url if webhook_url is not None else settings.notification_webhook_url
        self.timeout = timeout if timeout is not None else settings.notification_timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="lock-notify")

    def send_lock_confirmation(self, territory: Territory) -> Optional[Future]:
        try:
            future = self._executor.submit(self._deliver, territory)
        except RuntimeError as exc:
            logger.warning(f"Lock confirmation for {territory.id} not queued: {exc}")
            return None
        future.add_done_callback(self._log_failure)
        return future

    def _deliver(self, territory: Territory) -> None:
        logger.info(f"Lock confirmation sent: {territory.practice} ({territory.rep})")
        if not self.webhook_url:
            return
        payload: dict[str, Any] = {
            "text": f"Territory locked for {territory.practice} by {territory.rep}",
            "territory": {
                "id": territory.id,
                "lat": territory.lat,
                "lng": territory.lng,
                "radius": territory.radius,
                "practice": territory.practice,
                "rep": territory.rep,
                "repEmail": territory.rep_email,
                "lockDate": territory.lock_date.isoformat(),
            },
        }
        response = httpx.post(self.webhook_url, json=payload, timeout=self.timeout)
        response.raise_for_status()

    @staticmethod
    def _log_failure(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.warning(f"Lock confirmation failed: {exc}")

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
