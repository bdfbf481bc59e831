# src/sa_live_auction/application/schemas.py
"""Pydantic request/response schemas for the live auction surface.

All amounts are integer cents; ``*_display`` fields are formatted strings.
Responses are wrapped in ApiResponse at the router layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.sa_common.cents import cents_to_display
from src.sa_live_auction.domain.ledger import AuctionLedger
from src.sa_live_auction.domain.models import (
    BidEntry,
    BidSlab,
    PlayerResult,
    SessionConfig,
)
from src.sa_live_auction.domain.session import LiveAuctionSession
from src.sa_roster.domain.models import Player, Team

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class BidSlabIn(BaseModel):
    max_price_cents: int | None = Field(None, gt=0, description="None = unbounded top band")
    increment_cents: int = Field(..., gt=0)

    def to_domain(self) -> BidSlab:
        return BidSlab(max_price_cents=self.max_price_cents, increment_cents=self.increment_cents)


class StartSessionRequest(BaseModel):
    auction_id: str = Field(..., min_length=1)
    sport: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    auctioneer_name: str = ""
    team_ids: list[str] = Field(..., min_length=1)
    player_pool: list[str] = Field(..., min_length=1)
    bid_slabs: list[BidSlabIn] | None = None
    timer_duration: int | None = Field(None, gt=0, le=3600)

    @field_validator("team_ids", "player_pool")
    @classmethod
    def no_blank_ids(cls, v: list[str]) -> list[str]:
        if any(not item or not item.strip() for item in v):
            raise ValueError("ids must not be blank")
        return v

    def to_config(self, fallback_auctioneer_name: str) -> SessionConfig:
        return SessionConfig(
            auction_id=self.auction_id,
            sport=self.sport,
            name=self.name,
            auctioneer_name=self.auctioneer_name or fallback_auctioneer_name,
            team_ids=self.team_ids,
            player_pool=self.player_pool,
            bid_slabs=[s.to_domain() for s in self.bid_slabs] if self.bid_slabs else None,
            timer_duration=self.timer_duration,
        )


class SessionCommandRequest(BaseModel):
    """Body of the argument-less commands; omit session_id to target your own session."""

    session_id: str | None = None


class SelectPlayerRequest(SessionCommandRequest):
    player_id: str = Field(..., min_length=1)
    player_name: str = Field(..., min_length=1)
    base_price_cents: int = Field(..., ge=0)


class BidRequest(SessionCommandRequest):
    team_id: str = Field(..., min_length=1)
    team_name: str | None = None


class JumpBidRequest(BidRequest):
    jump_amount_cents: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BidSlabOut(BaseModel):
    max_price_cents: int | None
    increment_cents: int

    @classmethod
    def from_domain(cls, slab: BidSlab) -> "BidSlabOut":
        return cls(max_price_cents=slab.max_price_cents, increment_cents=slab.increment_cents)


class BidEntryOut(BaseModel):
    id: str
    team_id: str
    team_name: str
    bid_amount_cents: int
    bid_amount_display: str
    timestamp: datetime
    is_jump: bool

    @classmethod
    def from_domain(cls, bid: BidEntry) -> "BidEntryOut":
        return cls(
            id=bid.id,
            team_id=bid.team_id,
            team_name=bid.team_name,
            bid_amount_cents=bid.bid_amount_cents,
            bid_amount_display=cents_to_display(bid.bid_amount_cents),
            timestamp=bid.timestamp,
            is_jump=bid.is_jump,
        )


class BidderOut(BaseModel):
    team_id: str
    team_name: str


class LedgerOut(BaseModel):
    """Ledger content only; the live countdown is reported at state level."""

    state: str
    player_id: str
    player_name: str
    base_price_cents: int
    current_bid_cents: int
    current_bid_display: str
    next_valid_bid_cents: int
    current_increment_cents: int
    highest_bidder: BidderOut | None
    bid_history: list[BidEntryOut]
    timer_started_at: datetime | None
    timer_duration: int
    timer_remaining: float | None
    bid_slabs: list[BidSlabOut]
    finalized_at: datetime | None

    @classmethod
    def from_domain(cls, ledger: AuctionLedger) -> "LedgerOut":
        bidder = ledger.highest_bidder
        return cls(
            state=ledger.state.value,
            player_id=ledger.player_id,
            player_name=ledger.player_name,
            base_price_cents=ledger.base_price_cents,
            current_bid_cents=ledger.current_bid_cents,
            current_bid_display=cents_to_display(ledger.current_bid_cents),
            next_valid_bid_cents=ledger.next_bid_cents,
            current_increment_cents=ledger.current_increment_cents,
            highest_bidder=(
                BidderOut(team_id=bidder.team_id, team_name=bidder.team_name) if bidder else None
            ),
            bid_history=[BidEntryOut.from_domain(b) for b in ledger.bid_history],
            timer_started_at=ledger.timer_started_at,
            timer_duration=ledger.timer_duration,
            timer_remaining=ledger.timer_remaining,
            bid_slabs=[BidSlabOut.from_domain(s) for s in ledger.bid_slabs],
            finalized_at=ledger.finalized_at,
        )


class PlayerResultOut(BaseModel):
    player_id: str
    player_name: str
    status: str
    final_price_cents: int | None
    team_id: str | None
    team_name: str | None
    bid_count: int
    completed_at: datetime | None

    @classmethod
    def from_domain(cls, result: PlayerResult) -> "PlayerResultOut":
        return cls(
            player_id=result.player_id,
            player_name=result.player_name,
            status=result.status,
            final_price_cents=result.final_price_cents,
            team_id=result.team_id,
            team_name=result.team_name,
            bid_count=len(result.bid_history),
            completed_at=result.completed_at,
        )


class SessionOut(BaseModel):
    id: str
    auction_id: str
    sport: str
    name: str
    auctioneer_id: str
    auctioneer_name: str
    team_ids: list[str]
    player_pool: list[str]
    completed_player_ids: list[str]
    bid_slabs: list[BidSlabOut]
    timer_duration: int
    started_at: datetime | None
    results: list[PlayerResultOut]

    @classmethod
    def from_domain(cls, session: LiveAuctionSession) -> "SessionOut":
        return cls(
            id=session.id,
            auction_id=session.auction_id,
            sport=session.sport,
            name=session.name,
            auctioneer_id=session.auctioneer_id,
            auctioneer_name=session.auctioneer_name,
            team_ids=list(session.team_ids),
            player_pool=list(session.player_pool),
            completed_player_ids=list(session.completed_player_ids),
            bid_slabs=[BidSlabOut.from_domain(s) for s in session.bid_slabs],
            timer_duration=session.timer_duration,
            started_at=session.started_at,
            results=[PlayerResultOut.from_domain(r) for r in session.player_results],
        )


class TeamOut(BaseModel):
    id: str
    name: str
    purse_remaining_cents: int
    purse_remaining_display: str
    total_purse_cents: int
    player_ids: list[str]
    logo_url: str | None = None

    @classmethod
    def from_domain(cls, team: Team) -> "TeamOut":
        return cls(
            id=team.id,
            name=team.name,
            purse_remaining_cents=team.purse_remaining_cents,
            purse_remaining_display=cents_to_display(team.purse_remaining_cents),
            total_purse_cents=team.total_purse_cents,
            player_ids=list(team.player_ids),
            logo_url=team.logo_url,
        )


class PlayerOut(BaseModel):
    id: str
    name: str
    role: str = ""
    base_price_cents: int
    status: str
    image_url: str | None = None

    @classmethod
    def from_domain(cls, player: Player) -> "PlayerOut":
        return cls(
            id=player.id,
            name=player.name,
            role=player.role,
            base_price_cents=player.base_price_cents,
            status=player.status,
            image_url=player.image_url,
        )

    @classmethod
    def from_ledger(cls, ledger: AuctionLedger) -> "PlayerOut":
        """Fallback when the roster store has no record for the ledger's player."""
        return cls(
            id=ledger.player_id,
            name=ledger.player_name,
            base_price_cents=ledger.base_price_cents,
            status=ledger.state.value,
        )


class LiveAuctionStateResponse(BaseModel):
    """Full snapshot returned on every poll, never a delta."""

    has_active_auction: bool
    session: SessionOut | None = None
    ledger: LedgerOut | None = None
    teams: list[TeamOut] = Field(default_factory=list)
    current_player: PlayerOut | None = None
    time_remaining: int = 0
    is_timer_running: bool = False
    next_valid_bid_cents: int | None = None
    current_increment_cents: int | None = None
    poll_interval_ms: int = 1000
    server_time: datetime


class BidHistoryResponse(BaseModel):
    player_id: str
    history: list[BidEntryOut]
