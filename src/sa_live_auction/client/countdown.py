"""LocalCountdown: client-side timer reconciled against server snapshots.

Between polls the countdown ticks down locally once per second; every
successful poll recalibrates it from the server's ``timer_started_at`` and
``timer_duration`` so drift never accumulates.
"""

from datetime import datetime
from typing import Any

from src.sa_common.datetime_utils import parse_utc
from src.sa_common.enums import LedgerState
from src.sa_live_auction.domain.timer import compute_time_remaining, whole_seconds


class LocalCountdown:
    def __init__(self) -> None:
        self.time_remaining: int = 0
        self.is_running: bool = False

    def recalibrate(self, ledger: dict[str, Any] | None, now: datetime) -> None:
        """Reset from a ledger snapshot (the ``ledger`` object of GET /state)."""
        if ledger is None:
            self.is_running = False
            self.time_remaining = 0
            return
        state = ledger.get("state")
        started_at = parse_utc(ledger.get("timer_started_at"))
        if state == LedgerState.LIVE.value and started_at is not None:
            remaining = compute_time_remaining(started_at, ledger["timer_duration"], now)
            self.time_remaining = whole_seconds(remaining)
            self.is_running = True
            return
        self.is_running = False
        if state == LedgerState.PAUSED.value and ledger.get("timer_remaining") is not None:
            self.time_remaining = whole_seconds(ledger["timer_remaining"])
        elif state == LedgerState.READY.value:
            self.time_remaining = int(ledger.get("timer_duration", 0))

    def tick(self) -> None:
        if self.is_running and self.time_remaining > 0:
            self.time_remaining -= 1

    @property
    def expired(self) -> bool:
        """Advisory only; the auctioneer still decides sold/unsold."""
        return self.is_running and self.time_remaining == 0
