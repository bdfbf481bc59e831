"""Repository Protocol: the team/player store the auction core calls into.

The live auction core never owns team purses or player records; it requests
these mutations from whichever store implements this Protocol. Unit tests
inject an in-memory fake; infrastructure provides the PostgreSQL document store.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sa_roster.domain.models import Player, Team


class RosterRepositoryProtocol(Protocol):
    async def get_team(
        self, db: AsyncSession, sport: str, team_id: str
    ) -> Team | None: ...

    async def list_teams(
        self, db: AsyncSession, sport: str, team_ids: list[str]
    ) -> list[Team]: ...

    async def get_player(
        self, db: AsyncSession, sport: str, player_id: str
    ) -> Player | None: ...

    async def record_sale(
        self,
        db: AsyncSession,
        sport: str,
        team_id: str,
        player_id: str,
        amount_cents: int,
    ) -> bool: ...

    async def record_unsold(
        self, db: AsyncSession, sport: str, player_id: str
    ) -> None: ...

    async def save_auction_result(
        self, db: AsyncSession, sport: str, record: dict[str, Any]
    ) -> None: ...
