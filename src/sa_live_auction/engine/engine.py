"""LiveAuctionEngine: stateful orchestrator for live auction sessions.

Sessions live in memory and are snapshotted to the session store after every
committed command. Commands on one session are serialised by a per-session
asyncio.Lock and applied to a working copy; the copy replaces the in-memory
session only after the snapshot and the roster transaction have both been
committed. Reads take no lock and see the last committed session object.
"""

import asyncio
import copy
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.sa_common.caller import Caller
from src.sa_common.datetime_utils import utc_now
from src.sa_common.errors import (
    AlreadyActiveError,
    InsufficientPurseError,
    InvalidSessionConfigError,
    NotFoundError,
    UnauthorizedError,
)
from src.sa_live_auction.domain.ledger import AuctionLedger
from src.sa_live_auction.domain.models import BidEntry, PlayerResult, SessionConfig
from src.sa_live_auction.domain.repository import LiveSessionStoreProtocol
from src.sa_live_auction.domain.session import LiveAuctionSession
from src.sa_live_auction.domain.slabs import DEFAULT_BID_SLABS, validate_slabs
from src.sa_roster.domain.models import Team
from src.sa_roster.domain.repository import RosterRepositoryProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveAuctionEngine:
    def __init__(
        self,
        store: LiveSessionStoreProtocol,
        roster: RosterRepositoryProtocol,
        default_timer_seconds: int = 20,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._roster = roster
        self._default_timer_seconds = default_timer_seconds
        self._clock = clock
        self._sessions: dict[str, LiveAuctionSession] = {}
        # Only keys with a command running or waiting are kept
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_holders: dict[str, int] = {}

    @property
    def roster(self) -> RosterRepositoryProtocol:
        return self._roster

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Session lookup (lock-free)
    # ------------------------------------------------------------------

    async def get_session(self, session_id: str) -> LiveAuctionSession | None:
        """Return the committed session, lazily rebuilding it from the store."""
        session = self._sessions.get(session_id)
        if session is None:
            session = await self._store.load(session_id)
            if session is not None:
                self._sessions[session_id] = session
        return session

    async def find_session_id(
        self, caller: Caller, session_id: str | None, fallback_latest: bool
    ) -> str | None:
        if session_id:
            return session_id
        if caller.is_auctioneer:
            own = await self._store.find_session_id_by_auctioneer(caller.user_id)
            if own:
                return own
        if fallback_latest:
            return await self._store.latest_session_id()
        return None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start_session(self, caller: Caller, config: SessionConfig) -> LiveAuctionSession:
        if not caller.is_auctioneer:
            raise UnauthorizedError("Only auctioneers can start sessions")
        slabs = list(config.bid_slabs) if config.bid_slabs else list(DEFAULT_BID_SLABS)
        validate_slabs(slabs)
        timer = config.timer_duration or self._default_timer_seconds
        if timer <= 0:
            raise InvalidSessionConfigError("timer_duration must be > 0")

        async with self._hold(f"auctioneer:{caller.user_id}"):
            existing_id = await self._store.find_session_id_by_auctioneer(caller.user_id)
            if existing_id and await self.get_session(existing_id) is not None:
                raise AlreadyActiveError(caller.user_id)
            session = LiveAuctionSession.start(
                caller.user_id, config, slabs, timer, now=self.now()
            )
            await self._store.save(session)
            await self._store.mark_latest(session)
            self._sessions[session.id] = session
        return session

    async def end_session(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> dict[str, Any]:
        """Discard the session (abandoning any open ledger) and archive its results."""
        sid = await self._require_command_session_id(caller, session_id)
        await self._require_owned(caller, sid)
        async with self._hold(sid):
            session = await self._require_owned(caller, sid)
            record = session.summary(self.now())
            try:
                await self._roster.save_auction_result(db, session.sport, record)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            await self._store.delete(session)
            self._sessions.pop(sid, None)
        return record

    # ------------------------------------------------------------------
    # Ledger commands
    # ------------------------------------------------------------------

    async def select_player(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        player_id: str,
        player_name: str,
        base_price_cents: int,
    ) -> AuctionLedger:
        async def apply(session: LiveAuctionSession) -> AuctionLedger:
            return session.select_player(player_id, player_name, base_price_cents, self.now())

        return await self._mutate(db, caller, session_id, apply)

    async def start_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> AuctionLedger:
        async def apply(session: LiveAuctionSession) -> AuctionLedger:
            ledger = session.require_ledger()
            ledger.start_bidding(self.now())
            return ledger

        return await self._mutate(db, caller, session_id, apply)

    async def confirm_bid(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        team_id: str,
        team_name: str | None,
    ) -> BidEntry:
        async def apply(session: LiveAuctionSession) -> BidEntry:
            ledger = session.require_ledger()
            team = await self._require_team(db, session, team_id)
            return ledger.confirm_bid(
                team.id, team_name or team.name, team.purse_remaining_cents, self.now()
            )

        return await self._mutate(db, caller, session_id, apply)

    async def submit_jump_bid(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        team_id: str,
        team_name: str | None,
        amount_cents: int,
    ) -> BidEntry:
        async def apply(session: LiveAuctionSession) -> BidEntry:
            ledger = session.require_ledger()
            team = await self._require_team(db, session, team_id)
            return ledger.submit_jump_bid(
                team.id,
                team_name or team.name,
                amount_cents,
                team.purse_remaining_cents,
                self.now(),
            )

        return await self._mutate(db, caller, session_id, apply)

    async def pause_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> AuctionLedger:
        async def apply(session: LiveAuctionSession) -> AuctionLedger:
            ledger = session.require_ledger()
            ledger.pause_bidding(self.now())
            return ledger

        return await self._mutate(db, caller, session_id, apply)

    async def resume_bidding(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> AuctionLedger:
        async def apply(session: LiveAuctionSession) -> AuctionLedger:
            ledger = session.require_ledger()
            ledger.resume_bidding(self.now())
            return ledger

        return await self._mutate(db, caller, session_id, apply)

    async def mark_sold(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> PlayerResult:
        async def apply(session: LiveAuctionSession) -> PlayerResult:
            ledger = session.require_ledger()
            winner = ledger.check_sellable()
            amount = ledger.current_bid_cents
            debited = await self._roster.record_sale(
                db, session.sport, winner.team_id, ledger.player_id, amount
            )
            if not debited:
                team = await self._roster.get_team(db, session.sport, winner.team_id)
                available = team.purse_remaining_cents if team else 0
                raise InsufficientPurseError(winner.team_id, amount, available)
            ledger.mark_sold(self.now())
            return session.record_result(ledger)

        return await self._mutate(db, caller, session_id, apply)

    async def mark_unsold(
        self, db: AsyncSession, caller: Caller, session_id: str | None
    ) -> PlayerResult:
        async def apply(session: LiveAuctionSession) -> PlayerResult:
            ledger = session.require_ledger()
            ledger.check_unsellable()
            await self._roster.record_unsold(db, session.sport, ledger.player_id)
            ledger.mark_unsold(self.now())
            return session.record_result(ledger)

        return await self._mutate(db, caller, session_id, apply)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_holders[key] = self._lock_holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[key] -= 1
            if not self._lock_holders[key]:
                del self._lock_holders[key]
                del self._locks[key]

    async def _require_command_session_id(self, caller: Caller, session_id: str | None) -> str:
        # Role check comes before any session lookup
        if not caller.is_auctioneer:
            raise UnauthorizedError("Only auctioneers can control a live auction")
        sid = await self.find_session_id(caller, session_id, fallback_latest=False)
        if sid is None:
            raise NotFoundError(f"No running session for auctioneer {caller.user_id}")
        return sid

    async def _require_owned(self, caller: Caller, session_id: str) -> LiveAuctionSession:
        session = await self.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Live session not found: {session_id}")
        if not session.is_owned_by(caller):
            raise UnauthorizedError("Only the auctioneer running this session can control it")
        return session

    async def _require_team(
        self, db: AsyncSession, session: LiveAuctionSession, team_id: str
    ) -> Team:
        if not session.has_team(team_id):
            raise NotFoundError(f"Team {team_id} is not part of session {session.id}")
        team = await self._roster.get_team(db, session.sport, team_id)
        if team is None:
            raise NotFoundError(f"Team not found: {team_id}")
        return team

    async def _mutate(
        self,
        db: AsyncSession,
        caller: Caller,
        session_id: str | None,
        apply: Callable[[LiveAuctionSession], Awaitable[T]],
    ) -> T:
        sid = await self._require_command_session_id(caller, session_id)
        await self._require_owned(caller, sid)
        async with self._hold(sid):
            original = await self._require_owned(caller, sid)
            working = copy.deepcopy(original)
            snapshot_saved = False
            try:
                result = await apply(working)
                await self._store.save(working)
                snapshot_saved = True
                await db.commit()
            except Exception:
                await db.rollback()
                if snapshot_saved:
                    await self._restore_snapshot(original)
                raise
            self._sessions[sid] = working
            return result

    async def _restore_snapshot(self, original: LiveAuctionSession) -> None:
        try:
            await self._store.save(original)
        except Exception:
            # Drop the cached copy; the next access reloads whatever the store holds
            self._sessions.pop(original.id, None)
            logger.exception("Failed to restore snapshot for live session %s", original.id)
