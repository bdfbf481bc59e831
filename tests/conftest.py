"""Shared test fixtures.

Unit tests never touch PostgreSQL or Redis: the roster and the session store
are replaced with in-memory fakes, and the DB session is a MagicMock whose
commit/rollback are AsyncMocks.
"""

# ruff: noqa: E402  -- JWT_SECRET must be set before config.settings is imported

import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import asyncio
import json
from collections.abc import AsyncIterator
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.main import app
from src.sa_common.caller import Caller
from src.sa_common.database import get_db_session
from src.sa_common.enums import PlayerStatus
from src.sa_live_auction.api.router import get_live_auction_service
from src.sa_live_auction.application.service import LiveAuctionService
from src.sa_live_auction.domain.models import SessionConfig
from src.sa_live_auction.domain.session import LiveAuctionSession
from src.sa_live_auction.engine.engine import LiveAuctionEngine
from src.sa_live_auction.infrastructure.session_store import session_from_dict, session_to_dict
from src.sa_roster.domain.models import Player, Team

SPORT = "cricket"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeRoster:
    """In-memory RosterRepositoryProtocol. Returned teams are copies."""

    def __init__(self, teams: list[Team], players: list[Player]) -> None:
        self.teams = {t.id: t for t in teams}
        self.players = {p.id: p for p in players}
        self.history: list[dict[str, Any]] = []

    async def get_team(self, db: Any, sport: str, team_id: str) -> Team | None:
        await asyncio.sleep(0)  # let concurrent commands interleave
        team = self.teams.get(team_id)
        if team is None or team.sport != sport:
            return None
        return replace(team, player_ids=list(team.player_ids))

    async def list_teams(self, db: Any, sport: str, team_ids: list[str]) -> list[Team]:
        return [
            replace(self.teams[tid], player_ids=list(self.teams[tid].player_ids))
            for tid in team_ids
            if tid in self.teams
        ]

    async def get_player(self, db: Any, sport: str, player_id: str) -> Player | None:
        player = self.players.get(player_id)
        return replace(player) if player else None

    async def record_sale(
        self, db: Any, sport: str, team_id: str, player_id: str, amount_cents: int
    ) -> bool:
        team = self.teams.get(team_id)
        if team is None or team.purse_remaining_cents < amount_cents:
            return False
        team.purse_remaining_cents -= amount_cents
        team.player_ids.append(player_id)
        player = self.players.get(player_id)
        if player is not None:
            player.status = PlayerStatus.SOLD.value
            player.sold_price_cents = amount_cents
            player.team_id = team_id
        return True

    async def record_unsold(self, db: Any, sport: str, player_id: str) -> None:
        player = self.players.get(player_id)
        if player is not None:
            player.status = PlayerStatus.UNSOLD.value

    async def save_auction_result(self, db: Any, sport: str, record: dict[str, Any]) -> None:
        # Same primary key semantics as entity_documents: a repeated id is ignored
        if any(h.get("id") == record.get("id") for h in self.history):
            return
        self.history.append(record)


class FakeSessionStore:
    """In-memory LiveSessionStoreProtocol that keeps JSON snapshots like Redis does."""

    def __init__(self) -> None:
        self.snapshots: dict[str, str] = {}
        self.by_auctioneer: dict[str, str] = {}
        self.latest: str | None = None
        self.fail_saves = 0
        self.fail_deletes = 0
        self.save_count = 0

    async def save(self, session: LiveAuctionSession) -> None:
        if self.fail_saves:
            self.fail_saves -= 1
            raise RedisConnectionError("connection reset by peer")
        self.save_count += 1
        self.snapshots[session.id] = json.dumps(session_to_dict(session))
        self.by_auctioneer[session.auctioneer_id] = session.id

    async def mark_latest(self, session: LiveAuctionSession) -> None:
        self.latest = session.id

    async def load(self, session_id: str) -> LiveAuctionSession | None:
        raw = self.snapshots.get(session_id)
        return session_from_dict(json.loads(raw)) if raw else None

    async def delete(self, session: LiveAuctionSession) -> None:
        if self.fail_deletes:
            self.fail_deletes -= 1
            raise RedisConnectionError("connection reset by peer")
        self.snapshots.pop(session.id, None)
        self.by_auctioneer.pop(session.auctioneer_id, None)
        if self.latest == session.id:
            self.latest = None

    async def find_session_id_by_auctioneer(self, auctioneer_id: str) -> str | None:
        return self.by_auctioneer.get(auctioneer_id)

    async def latest_session_id(self) -> str | None:
        return self.latest


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def roster() -> FakeRoster:
    teams = [
        Team("team-a", SPORT, "Mumbai Mavericks", 5000, 5000),
        Team("team-b", SPORT, "Chennai Chargers", 1030, 1030),
        Team("team-c", SPORT, "Delhi Dynamos", 100000, 100000),
    ]
    players = [
        Player("p1", SPORT, "Arjun Rao", "batsman", 1000),
        Player("p2", SPORT, "Kiran Shah", "bowler", 500),
        Player("p3", SPORT, "Dev Iyer", "all-rounder", 2000),
    ]
    return FakeRoster(teams, players)


@pytest.fixture
def store() -> FakeSessionStore:
    return FakeSessionStore()


@pytest.fixture
def engine(store: FakeSessionStore, roster: FakeRoster, clock: FakeClock) -> LiveAuctionEngine:
    return LiveAuctionEngine(store, roster, default_timer_seconds=20, clock=clock)


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def auctioneer() -> Caller:
    return Caller(user_id="auc-1", role="auctioneer", name="Meera")


@pytest.fixture
def viewer() -> Caller:
    return Caller(user_id="fan-1", role="player", name="Ravi")


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(
        auction_id="auction-2026",
        sport=SPORT,
        name="Premier League Draft",
        auctioneer_name="Meera",
        team_ids=["team-a", "team-b", "team-c"],
        player_pool=["p1", "p2", "p3"],
    )


@pytest.fixture
async def client(engine: LiveAuctionEngine, db: MagicMock) -> AsyncIterator[AsyncClient]:
    """Async HTTP client for the FastAPI app, wired to the in-memory engine."""
    service = LiveAuctionService(engine)

    async def _db_session() -> AsyncIterator[MagicMock]:
        yield db

    app.dependency_overrides[get_db_session] = _db_session
    app.dependency_overrides[get_live_auction_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
