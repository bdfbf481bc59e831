"""Domain value objects for sa_live_auction: pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BidSlab:
    """Price band -> minimum raise. ``max_price_cents=None`` is the unbounded top band."""

    max_price_cents: int | None
    increment_cents: int


@dataclass(frozen=True)
class Bidder:
    team_id: str
    team_name: str


@dataclass(frozen=True)
class BidEntry:
    """One committed bid. Never mutated after it is appended to a ledger."""

    id: str
    team_id: str
    team_name: str
    bid_amount_cents: int
    timestamp: datetime
    is_jump: bool = False


@dataclass
class PlayerResult:
    """Outcome of one finalised player auction within a session."""

    player_id: str
    player_name: str
    status: str  # SOLD / UNSOLD
    base_price_cents: int
    final_price_cents: int | None
    team_id: str | None
    team_name: str | None
    bid_history: list[BidEntry] = field(default_factory=list)
    completed_at: datetime | None = None


@dataclass
class SessionConfig:
    """Validated input for starting a live session."""

    auction_id: str
    sport: str
    name: str
    auctioneer_name: str
    team_ids: list[str]
    player_pool: list[str]
    bid_slabs: list[BidSlab] | None = None
    timer_duration: int | None = None
