"""AuctionLedger: the state machine for one player's live auction.

    READY ──start──▶ LIVE ◀──resume── PAUSED
                      │  └───pause───▶  │
                      ├──sold/unsold────┤
                      ▼                 ▼
                    SOLD / UNSOLD (terminal)

Every command validates fully before mutating anything, so a rejected
command leaves the ledger exactly as it was. Timer expiry is advisory: it
is exposed to clients but never finalises the ledger by itself.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from src.sa_common.datetime_utils import utc_now
from src.sa_common.enums import LedgerState
from src.sa_common.errors import (
    InsufficientPurseError,
    InvalidBidAmountError,
    InvalidStateError,
    NoBidsPlacedError,
)
from src.sa_common.id_generator import generate_id
from src.sa_live_auction.domain.models import BidEntry, Bidder, BidSlab
from src.sa_live_auction.domain.slabs import increment_for, is_on_ladder, next_bid
from src.sa_live_auction.domain.timer import compute_time_remaining

_OPEN_STATES = (LedgerState.LIVE, LedgerState.PAUSED)
_TERMINAL_STATES = (LedgerState.SOLD, LedgerState.UNSOLD)


@dataclass
class AuctionLedger:
    player_id: str
    player_name: str
    base_price_cents: int
    current_bid_cents: int
    bid_slabs: list[BidSlab]
    timer_duration: int  # seconds
    state: LedgerState = LedgerState.READY
    highest_bidder: Bidder | None = None
    bid_history: list[BidEntry] = field(default_factory=list)
    timer_started_at: datetime | None = None
    timer_remaining: float | None = None  # frozen countdown while PAUSED
    created_at: datetime | None = None
    finalized_at: datetime | None = None

    @classmethod
    def create(
        cls,
        player_id: str,
        player_name: str,
        base_price_cents: int,
        bid_slabs: list[BidSlab],
        timer_duration: int,
        now: datetime | None = None,
    ) -> "AuctionLedger":
        return cls(
            player_id=player_id,
            player_name=player_name,
            base_price_cents=base_price_cents,
            current_bid_cents=base_price_cents,
            bid_slabs=list(bid_slabs),
            timer_duration=timer_duration,
            created_at=now or utc_now(),
        )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.state in _TERMINAL_STATES

    @property
    def next_bid_cents(self) -> int:
        return next_bid(self.current_bid_cents, self.bid_slabs)

    @property
    def current_increment_cents(self) -> int:
        return increment_for(self.current_bid_cents, self.bid_slabs)

    def time_remaining(self, now: datetime | None = None) -> float:
        if self.state == LedgerState.LIVE:
            return compute_time_remaining(
                self.timer_started_at, self.timer_duration, now or utc_now()
            )
        if self.state == LedgerState.PAUSED and self.timer_remaining is not None:
            return self.timer_remaining
        if self.state == LedgerState.READY:
            return float(self.timer_duration)
        return 0.0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require(self, action: str, *allowed: LedgerState) -> None:
        if self.state not in allowed:
            raise InvalidStateError(action, self.state.value)

    def start_bidding(self, now: datetime | None = None) -> None:
        self._require("start bidding", LedgerState.READY)
        self.state = LedgerState.LIVE
        self.timer_started_at = now or utc_now()
        self.timer_remaining = None

    def confirm_bid(
        self,
        team_id: str,
        team_name: str,
        purse_remaining_cents: int,
        now: datetime | None = None,
    ) -> BidEntry:
        """Raise the paddle for a team at the next slab step."""
        self._require("confirm bid", LedgerState.LIVE)
        amount = self.next_bid_cents
        if purse_remaining_cents < amount:
            raise InsufficientPurseError(team_id, amount, purse_remaining_cents)
        return self._commit_bid(team_id, team_name, amount, False, now)

    def submit_jump_bid(
        self,
        team_id: str,
        team_name: str,
        amount_cents: int,
        purse_remaining_cents: int,
        now: datetime | None = None,
    ) -> BidEntry:
        """Bid a specific amount above the next step; must land on the slab ladder."""
        self._require("submit jump bid", LedgerState.LIVE)
        if amount_cents <= self.current_bid_cents:
            raise InvalidBidAmountError(
                f"{amount_cents} must exceed current bid {self.current_bid_cents}"
            )
        if not is_on_ladder(self.current_bid_cents, amount_cents, self.bid_slabs):
            raise InvalidBidAmountError(
                f"{amount_cents} is not a valid increment step above {self.current_bid_cents}"
            )
        if purse_remaining_cents < amount_cents:
            raise InsufficientPurseError(team_id, amount_cents, purse_remaining_cents)
        return self._commit_bid(team_id, team_name, amount_cents, True, now)

    def _commit_bid(
        self,
        team_id: str,
        team_name: str,
        amount_cents: int,
        is_jump: bool,
        now: datetime | None,
    ) -> BidEntry:
        ts = now or utc_now()
        entry = BidEntry(
            id=generate_id("bid_"),
            team_id=team_id,
            team_name=team_name,
            bid_amount_cents=amount_cents,
            timestamp=ts,
            is_jump=is_jump,
        )
        self.bid_history.append(entry)
        self.current_bid_cents = amount_cents
        self.highest_bidder = Bidder(team_id=team_id, team_name=team_name)
        # Every bid restarts the full countdown
        self.timer_started_at = ts
        return entry

    def pause_bidding(self, now: datetime | None = None) -> None:
        self._require("pause bidding", LedgerState.LIVE)
        self.timer_remaining = compute_time_remaining(
            self.timer_started_at, self.timer_duration, now or utc_now()
        )
        self.state = LedgerState.PAUSED

    def resume_bidding(self, now: datetime | None = None) -> None:
        self._require("resume bidding", LedgerState.PAUSED)
        remaining = (
            self.timer_remaining if self.timer_remaining is not None
            else float(self.timer_duration)
        )
        ts = now or utc_now()
        # Backdate the start so duration - elapsed == frozen remaining
        elapsed_before_pause = self.timer_duration - remaining
        self.timer_started_at = ts - timedelta(seconds=elapsed_before_pause)
        self.timer_remaining = None
        self.state = LedgerState.LIVE

    def check_sellable(self) -> Bidder:
        """Validate mark_sold without mutating; returns the winning bidder."""
        self._require("mark sold", *_OPEN_STATES)
        if self.highest_bidder is None:
            raise NoBidsPlacedError(self.player_id)
        return self.highest_bidder

    def check_unsellable(self) -> None:
        self._require("mark unsold", *_OPEN_STATES)

    def mark_sold(self, now: datetime | None = None) -> Bidder:
        winner = self.check_sellable()
        self._finalize(LedgerState.SOLD, now)
        return winner

    def mark_unsold(self, now: datetime | None = None) -> None:
        self.check_unsellable()
        self._finalize(LedgerState.UNSOLD, now)

    def _finalize(self, state: LedgerState, now: datetime | None) -> None:
        ts = now or utc_now()
        if self.state == LedgerState.LIVE:
            self.timer_remaining = compute_time_remaining(
                self.timer_started_at, self.timer_duration, ts
            )
        self.state = state
        self.finalized_at = ts
