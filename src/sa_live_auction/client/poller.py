"""LiveAuctionPoller: keeps a client's view in sync by polling full snapshots.

    async with LiveAuctionPoller(http) as poller:
        ...  # poller.state / poller.countdown stay current

Each poll fetches the whole session/ledger/teams snapshot, never a delta, so a
dropped client simply resumes on its next poll. Leaving the ``async with``
block (normally or through an exception) cancels both background tasks.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from src.sa_common.datetime_utils import utc_now
from src.sa_live_auction.client.countdown import LocalCountdown

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0  # seconds


def build_http_client(base_url: str, token: str, timeout: float = 5.0) -> httpx.AsyncClient:
    """HTTP client for the API root (e.g. ``http://localhost:8000/api/v1``)."""
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Authorization": f"Bearer {token}"},
        timeout=timeout,
    )


class LiveAuctionPoller:
    def __init__(
        self,
        http: httpx.AsyncClient,
        session_id: str | None = None,
        poll_interval: float | None = None,
        clock: Callable[[], datetime] = utc_now,
        on_update: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self._http = http
        self.session_id = session_id
        # None: follow the server's poll_interval_ms hint
        self._fixed_interval = poll_interval is not None
        self.poll_interval = poll_interval if poll_interval is not None else DEFAULT_POLL_INTERVAL
        self._clock = clock
        self._on_update = on_update
        self._tasks: list[asyncio.Task[None]] = []
        self.countdown = LocalCountdown()
        self.state: dict[str, Any] | None = None
        self.error: str | None = None

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    @property
    def ledger(self) -> dict[str, Any] | None:
        return self.state.get("ledger") if self.state else None

    @property
    def has_active_auction(self) -> bool:
        return bool(self.state and self.state.get("has_active_auction"))

    async def refresh(self) -> bool:
        """Fetch one full snapshot. Returns False (and keeps the old view) on failure."""
        params = {"session_id": self.session_id} if self.session_id else None
        try:
            resp = await self._http.get("/live-auction/state", params=params)
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to refresh auction state: %s", exc)
            return False

        if not isinstance(payload, dict):
            payload = {}
        if not payload.get("success") or not isinstance(payload.get("data"), dict):
            self.error = payload.get("message") or "Failed to refresh auction state"
            logger.warning("Auction state refresh rejected: %s", self.error)
            return False

        self.state = payload["data"]
        self.error = None
        hint_ms = self.state.get("poll_interval_ms")
        if not self._fixed_interval and hint_ms:
            self.poll_interval = hint_ms / 1000
        self.countdown.recalibrate(self.ledger, self._clock())
        if self._on_update is not None:
            self._on_update(self.state)
        return True

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._poll_loop(), name="live-auction-poll"),
            asyncio.create_task(self._tick_loop(), name="live-auction-tick"),
        ]

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "LiveAuctionPoller":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Auction state poll failed")
            await asyncio.sleep(self.poll_interval)

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(1)
            self.countdown.tick()
