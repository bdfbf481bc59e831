"""RedisSessionStore: concrete implementation of LiveSessionStoreProtocol.

Key layout:
  live_auction:session:{session_id}          JSON snapshot of the whole session
  live_auction:auctioneer:{auctioneer_id}    -> session_id of that auctioneer's run
  live_auction:latest                        -> most recently started session_id

A snapshot is written after every committed mutation, so it always holds the
last state clients were allowed to observe.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as aioredis

from src.sa_common.datetime_utils import parse_utc
from src.sa_common.enums import LedgerState
from src.sa_common.redis_client import get_redis
from src.sa_live_auction.domain.ledger import AuctionLedger
from src.sa_live_auction.domain.models import BidEntry, Bidder, BidSlab, PlayerResult
from src.sa_live_auction.domain.session import LiveAuctionSession

_SESSION_KEY = "live_auction:session:{}"
_AUCTIONEER_KEY = "live_auction:auctioneer:{}"
_LATEST_KEY = "live_auction:latest"

# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _iso(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


def _slab_to_dict(slab: BidSlab) -> dict[str, Any]:
    return {"max_price_cents": slab.max_price_cents, "increment_cents": slab.increment_cents}


def _slab_from_dict(d: dict[str, Any]) -> BidSlab:
    return BidSlab(max_price_cents=d["max_price_cents"], increment_cents=d["increment_cents"])


def _bid_to_dict(bid: BidEntry) -> dict[str, Any]:
    return {
        "id": bid.id,
        "team_id": bid.team_id,
        "team_name": bid.team_name,
        "bid_amount_cents": bid.bid_amount_cents,
        "timestamp": _iso(bid.timestamp),
        "is_jump": bid.is_jump,
    }


def _bid_from_dict(d: dict[str, Any]) -> BidEntry:
    return BidEntry(
        id=d["id"],
        team_id=d["team_id"],
        team_name=d["team_name"],
        bid_amount_cents=d["bid_amount_cents"],
        timestamp=parse_utc(d["timestamp"]),  # type: ignore[arg-type]
        is_jump=d.get("is_jump", False),
    )


def ledger_to_dict(ledger: AuctionLedger) -> dict[str, Any]:
    bidder = ledger.highest_bidder
    return {
        "player_id": ledger.player_id,
        "player_name": ledger.player_name,
        "base_price_cents": ledger.base_price_cents,
        "current_bid_cents": ledger.current_bid_cents,
        "bid_slabs": [_slab_to_dict(s) for s in ledger.bid_slabs],
        "timer_duration": ledger.timer_duration,
        "state": ledger.state.value,
        "highest_bidder": (
            {"team_id": bidder.team_id, "team_name": bidder.team_name} if bidder else None
        ),
        "bid_history": [_bid_to_dict(b) for b in ledger.bid_history],
        "timer_started_at": _iso(ledger.timer_started_at),
        "timer_remaining": ledger.timer_remaining,
        "created_at": _iso(ledger.created_at),
        "finalized_at": _iso(ledger.finalized_at),
    }


def ledger_from_dict(d: dict[str, Any]) -> AuctionLedger:
    bidder = d.get("highest_bidder")
    return AuctionLedger(
        player_id=d["player_id"],
        player_name=d["player_name"],
        base_price_cents=d["base_price_cents"],
        current_bid_cents=d["current_bid_cents"],
        bid_slabs=[_slab_from_dict(s) for s in d["bid_slabs"]],
        timer_duration=d["timer_duration"],
        state=LedgerState(d["state"]),
        highest_bidder=Bidder(**bidder) if bidder else None,
        bid_history=[_bid_from_dict(b) for b in d.get("bid_history", [])],
        timer_started_at=parse_utc(d.get("timer_started_at")),
        timer_remaining=d.get("timer_remaining"),
        created_at=parse_utc(d.get("created_at")),
        finalized_at=parse_utc(d.get("finalized_at")),
    )


def _result_to_dict(r: PlayerResult) -> dict[str, Any]:
    return {
        "player_id": r.player_id,
        "player_name": r.player_name,
        "status": r.status,
        "base_price_cents": r.base_price_cents,
        "final_price_cents": r.final_price_cents,
        "team_id": r.team_id,
        "team_name": r.team_name,
        "bid_history": [_bid_to_dict(b) for b in r.bid_history],
        "completed_at": _iso(r.completed_at),
    }


def _result_from_dict(d: dict[str, Any]) -> PlayerResult:
    return PlayerResult(
        player_id=d["player_id"],
        player_name=d["player_name"],
        status=d["status"],
        base_price_cents=d["base_price_cents"],
        final_price_cents=d.get("final_price_cents"),
        team_id=d.get("team_id"),
        team_name=d.get("team_name"),
        bid_history=[_bid_from_dict(b) for b in d.get("bid_history", [])],
        completed_at=parse_utc(d.get("completed_at")),
    )


def session_to_dict(session: LiveAuctionSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "auction_id": session.auction_id,
        "sport": session.sport,
        "name": session.name,
        "auctioneer_id": session.auctioneer_id,
        "auctioneer_name": session.auctioneer_name,
        "team_ids": list(session.team_ids),
        "player_pool": list(session.player_pool),
        "completed_player_ids": list(session.completed_player_ids),
        "bid_slabs": [_slab_to_dict(s) for s in session.bid_slabs],
        "timer_duration": session.timer_duration,
        "player_results": [_result_to_dict(r) for r in session.player_results],
        "ledger": ledger_to_dict(session.ledger) if session.ledger else None,
        "started_at": _iso(session.started_at),
    }


def session_from_dict(d: dict[str, Any]) -> LiveAuctionSession:
    return LiveAuctionSession(
        id=d["id"],
        auction_id=d["auction_id"],
        sport=d["sport"],
        name=d["name"],
        auctioneer_id=d["auctioneer_id"],
        auctioneer_name=d["auctioneer_name"],
        team_ids=list(d["team_ids"]),
        player_pool=list(d["player_pool"]),
        bid_slabs=[_slab_from_dict(s) for s in d["bid_slabs"]],
        timer_duration=d["timer_duration"],
        completed_player_ids=list(d.get("completed_player_ids", [])),
        player_results=[_result_from_dict(r) for r in d.get("player_results", [])],
        ledger=ledger_from_dict(d["ledger"]) if d.get("ledger") else None,
        started_at=parse_utc(d.get("started_at")),
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class RedisSessionStore:
    def __init__(
        self, redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis
    ) -> None:
        self._redis_factory = redis_factory

    async def save(self, session: LiveAuctionSession) -> None:
        redis = await self._redis_factory()
        payload = json.dumps(session_to_dict(session))
        async with redis.pipeline(transaction=True) as pipe:
            pipe.set(_SESSION_KEY.format(session.id), payload)
            pipe.set(_AUCTIONEER_KEY.format(session.auctioneer_id), session.id)
            await pipe.execute()

    async def mark_latest(self, session: LiveAuctionSession) -> None:
        redis = await self._redis_factory()
        await redis.set(_LATEST_KEY, session.id)

    async def load(self, session_id: str) -> LiveAuctionSession | None:
        redis = await self._redis_factory()
        raw = await redis.get(_SESSION_KEY.format(session_id))
        if raw is None:
            return None
        return session_from_dict(json.loads(raw))

    async def delete(self, session: LiveAuctionSession) -> None:
        redis = await self._redis_factory()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.delete(_SESSION_KEY.format(session.id))
            pipe.delete(_AUCTIONEER_KEY.format(session.auctioneer_id))
            await pipe.execute()
        if await redis.get(_LATEST_KEY) == session.id:
            await redis.delete(_LATEST_KEY)

    async def find_session_id_by_auctioneer(self, auctioneer_id: str) -> str | None:
        redis = await self._redis_factory()
        value = await redis.get(_AUCTIONEER_KEY.format(auctioneer_id))
        return str(value) if value else None

    async def latest_session_id(self) -> str | None:
        redis = await self._redis_factory()
        value = await redis.get(_LATEST_KEY)
        return str(value) if value else None
