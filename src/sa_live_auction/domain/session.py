"""LiveAuctionSession: one auctioneer's run through a pool of players.

Owns the remaining player pool and at most one open ledger. A finalised
(SOLD/UNSOLD) ledger stays attached so viewers can see the outcome until the
auctioneer selects the next player.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.sa_common.caller import Caller
from src.sa_common.datetime_utils import utc_now
from src.sa_common.enums import LedgerState
from src.sa_common.errors import InvalidStateError, NotFoundError, PlayerNotInPoolError
from src.sa_common.id_generator import generate_id
from src.sa_live_auction.domain.ledger import AuctionLedger
from src.sa_live_auction.domain.models import BidEntry, BidSlab, PlayerResult, SessionConfig


@dataclass
class LiveAuctionSession:
    id: str
    auction_id: str
    sport: str
    name: str
    auctioneer_id: str
    auctioneer_name: str
    team_ids: list[str]
    player_pool: list[str]
    bid_slabs: list[BidSlab]
    timer_duration: int
    completed_player_ids: list[str] = field(default_factory=list)
    player_results: list[PlayerResult] = field(default_factory=list)
    ledger: AuctionLedger | None = None
    started_at: datetime | None = None

    @classmethod
    def start(
        cls,
        auctioneer_id: str,
        config: SessionConfig,
        bid_slabs: list[BidSlab],
        timer_duration: int,
        now: datetime | None = None,
    ) -> "LiveAuctionSession":
        return cls(
            id=generate_id("las_"),
            auction_id=config.auction_id,
            sport=config.sport,
            name=config.name,
            auctioneer_id=auctioneer_id,
            auctioneer_name=config.auctioneer_name,
            team_ids=list(dict.fromkeys(config.team_ids)),
            player_pool=list(dict.fromkeys(config.player_pool)),
            bid_slabs=list(bid_slabs),
            timer_duration=timer_duration,
            started_at=now or utc_now(),
        )

    def is_owned_by(self, caller: Caller) -> bool:
        return caller.is_auctioneer and caller.user_id == self.auctioneer_id

    @property
    def active_ledger(self) -> AuctionLedger | None:
        """The ledger still open for commands, if any."""
        if self.ledger is None or self.ledger.is_terminal:
            return None
        return self.ledger

    def require_ledger(self) -> AuctionLedger:
        ledger = self.active_ledger
        if ledger is None:
            raise NotFoundError(f"No player is currently up for auction in session {self.id}")
        return ledger

    def has_team(self, team_id: str) -> bool:
        return team_id in self.team_ids

    def select_player(
        self,
        player_id: str,
        player_name: str,
        base_price_cents: int,
        now: datetime | None = None,
    ) -> AuctionLedger:
        current = self.active_ledger
        if current is not None:
            raise InvalidStateError(
                f"select a player while {current.player_id} is", current.state.value
            )
        if player_id not in self.player_pool:
            raise PlayerNotInPoolError(player_id)
        self.ledger = AuctionLedger.create(
            player_id=player_id,
            player_name=player_name,
            base_price_cents=base_price_cents,
            bid_slabs=self.bid_slabs,
            timer_duration=self.timer_duration,
            now=now,
        )
        return self.ledger

    def record_result(self, ledger: AuctionLedger) -> PlayerResult:
        """Move a finalised ledger's player out of the pool and keep its outcome."""
        if not ledger.is_terminal:
            raise InvalidStateError("record result", ledger.state.value)
        sold = ledger.state == LedgerState.SOLD
        winner = ledger.highest_bidder if sold else None
        result = PlayerResult(
            player_id=ledger.player_id,
            player_name=ledger.player_name,
            status=ledger.state.value,
            base_price_cents=ledger.base_price_cents,
            final_price_cents=ledger.current_bid_cents if sold else None,
            team_id=winner.team_id if winner else None,
            team_name=winner.team_name if winner else None,
            bid_history=list(ledger.bid_history),
            completed_at=ledger.finalized_at,
        )
        if ledger.player_id in self.player_pool:
            self.player_pool.remove(ledger.player_id)
        if ledger.player_id not in self.completed_player_ids:
            self.completed_player_ids.append(ledger.player_id)
        self.player_results.append(result)
        return result

    def bid_history_for(self, player_id: str) -> list[BidEntry]:
        if self.ledger is not None and self.ledger.player_id == player_id:
            return list(self.ledger.bid_history)
        for result in reversed(self.player_results):
            if result.player_id == player_id:
                return list(result.bid_history)
        return []

    def summary(self, now: datetime | None = None) -> dict[str, Any]:
        """Auction-history record written when the session ends."""
        completed_at = now or utc_now()
        sold = [r for r in self.player_results if r.status == LedgerState.SOLD.value]
        duration = (
            int((completed_at - self.started_at).total_seconds()) if self.started_at else 0
        )
        return {
            "id": f"hist_{self.id}",
            "session_id": self.id,
            "auction_id": self.auction_id,
            "sport": self.sport,
            "auction_name": self.name,
            "auctioneer_id": self.auctioneer_id,
            "auctioneer_name": self.auctioneer_name,
            "team_ids": list(self.team_ids),
            "player_results": [
                {
                    "player_id": r.player_id,
                    "player_name": r.player_name,
                    "status": r.status,
                    "base_price_cents": r.base_price_cents,
                    "final_price_cents": r.final_price_cents,
                    "team_id": r.team_id,
                    "team_name": r.team_name,
                    "bid_count": len(r.bid_history),
                    "completed_at": r.completed_at.isoformat() if r.completed_at else None,
                }
                for r in self.player_results
            ],
            "current_stats": {
                "players_auctioned": len(self.player_results),
                "players_sold": len(sold),
                "players_unsold": len(self.player_results) - len(sold),
                "total_spent_cents": sum(r.final_price_cents or 0 for r in sold),
            },
            "unauctioned_player_ids": list(self.player_pool),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": completed_at.isoformat(),
            "total_duration_seconds": duration,
        }
