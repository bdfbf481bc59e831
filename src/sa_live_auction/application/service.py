"""LiveAuctionService: thin composition layer over LiveAuctionEngine.

Every public method returns an ActionResult instead of raising: domain
rejections (AppError) and storage I/O failures both come back as failures,
with the failure kind logged. Successful commands are logged at INFO.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sa_common.caller import Caller
from src.sa_common.enums import LedgerState
from src.sa_common.errors import AppError, InternalError
from src.sa_live_auction.application.results import ActionResult
from src.sa_live_auction.application.schemas import (
    BidEntryOut,
    BidHistoryResponse,
    LedgerOut,
    LiveAuctionStateResponse,
    PlayerOut,
    PlayerResultOut,
    SessionOut,
    StartSessionRequest,
    TeamOut,
)
from src.sa_live_auction.domain.timer import whole_seconds
from src.sa_live_auction.engine.engine import LiveAuctionEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveAuctionService:
    def __init__(self, engine: LiveAuctionEngine, poll_interval_ms: int = 1000) -> None:
        self._engine = engine
        self._poll_interval_ms = poll_interval_ms

    async def _execute(
        self,
        action: str,
        caller: Caller,
        call: Callable[[], Awaitable[T]],
        to_data: Callable[[T], Any],
    ) -> ActionResult:
        try:
            value = await call()
        except AppError as exc:
            logger.warning(
                "live_auction.%s rejected user=%s kind=%s: %s",
                action, caller.user_id, exc.kind, exc.message,
            )
            return ActionResult.failed(exc)
        except (SQLAlchemyError, RedisError, OSError):
            logger.exception("live_auction.%s storage failure user=%s", action, caller.user_id)
            return ActionResult.failed(InternalError("Storage unavailable, please retry"))
        logger.info("live_auction.%s committed user=%s", action, caller.user_id)
        return ActionResult.ok(to_data(value))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start_session(self, caller: Caller, body: StartSessionRequest) -> ActionResult:
        config = body.to_config(fallback_auctioneer_name=caller.name)
        return await self._execute(
            "start_session",
            caller,
            lambda: self._engine.start_session(caller, config),
            lambda session: {"session": SessionOut.from_domain(session).model_dump(mode="json")},
        )

    async def select_player(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        player_id: str,
        player_name: str,
        base_price_cents: int,
    ) -> ActionResult:
        return await self._execute(
            "select_player",
            caller,
            lambda: self._engine.select_player(
                db, caller, session_id, player_id, player_name, base_price_cents
            ),
            _ledger_data,
        )

    async def start_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "start_bidding",
            caller,
            lambda: self._engine.start_bidding(db, caller, session_id),
            _ledger_data,
        )

    async def confirm_bid(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        team_id: str,
        team_name: str | None,
    ) -> ActionResult:
        return await self._execute(
            "confirm_bid",
            caller,
            lambda: self._engine.confirm_bid(db, caller, session_id, team_id, team_name),
            _bid_data,
        )

    async def submit_jump_bid(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        team_id: str,
        team_name: str | None,
        amount_cents: int,
    ) -> ActionResult:
        return await self._execute(
            "jump_bid",
            caller,
            lambda: self._engine.submit_jump_bid(
                db, caller, session_id, team_id, team_name, amount_cents
            ),
            _bid_data,
        )

    async def pause_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "pause",
            caller,
            lambda: self._engine.pause_bidding(db, caller, session_id),
            _ledger_data,
        )

    async def resume_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "resume",
            caller,
            lambda: self._engine.resume_bidding(db, caller, session_id),
            _ledger_data,
        )

    async def mark_sold(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "sold",
            caller,
            lambda: self._engine.mark_sold(db, caller, session_id),
            _result_data,
        )

    async def mark_unsold(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "unsold",
            caller,
            lambda: self._engine.mark_unsold(db, caller, session_id),
            _result_data,
        )

    async def end_session(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "end_session",
            caller,
            lambda: self._engine.end_session(db, caller, session_id),
            lambda record: {"summary": record},
        )

    # ------------------------------------------------------------------
    # Reads (no lock, full snapshot)
    # ------------------------------------------------------------------

    async def get_state(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> ActionResult:
        return await self._execute(
            "state",
            caller,
            lambda: self._build_state(db, caller, session_id),
            lambda state: state.model_dump(mode="json"),
        )

    async def get_player_history(
        self, caller: Caller, session_id: str | None, player_id: str
    ) -> ActionResult:
        async def load() -> BidHistoryResponse:
            sid = await self._engine.find_session_id(caller, session_id, fallback_latest=True)
            session = await self._engine.get_session(sid) if sid else None
            history = session.bid_history_for(player_id) if session else []
            return BidHistoryResponse(
                player_id=player_id,
                history=[BidEntryOut.from_domain(b) for b in history],
            )

        return await self._execute(
            "history", caller, load, lambda resp: resp.model_dump(mode="json")
        )

    async def _build_state(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> LiveAuctionStateResponse:
        now = self._engine.now()
        sid = await self._engine.find_session_id(caller, session_id, fallback_latest=True)
        session = await self._engine.get_session(sid) if sid else None
        if session is None:
            return LiveAuctionStateResponse(
                has_active_auction=False,
                poll_interval_ms=self._poll_interval_ms,
                server_time=now,
            )

        roster = self._engine.roster
        teams = await roster.list_teams(db, session.sport, session.team_ids)
        ledger = session.ledger
        current_player: PlayerOut | None = None
        if ledger is not None:
            player = await roster.get_player(db, session.sport, ledger.player_id)
            current_player = (
                PlayerOut.from_domain(player) if player else PlayerOut.from_ledger(ledger)
            )

        return LiveAuctionStateResponse(
            has_active_auction=True,
            session=SessionOut.from_domain(session),
            ledger=LedgerOut.from_domain(ledger) if ledger else None,
            teams=[TeamOut.from_domain(t) for t in teams],
            current_player=current_player,
            time_remaining=whole_seconds(ledger.time_remaining(now)) if ledger else 0,
            is_timer_running=ledger is not None and ledger.state == LedgerState.LIVE,
            next_valid_bid_cents=ledger.next_bid_cents if ledger else None,
            current_increment_cents=ledger.current_increment_cents if ledger else None,
            poll_interval_ms=self._poll_interval_ms,
            server_time=now,
        )


def _ledger_data(ledger: Any) -> dict[str, Any]:
    return {"ledger": LedgerOut.from_domain(ledger).model_dump(mode="json")}


def _bid_data(bid: Any) -> dict[str, Any]:
    return {"bid": BidEntryOut.from_domain(bid).model_dump(mode="json")}


def _result_data(result: Any) -> dict[str, Any]:
    return {"result": PlayerResultOut.from_domain(result).model_dump(mode="json")}
