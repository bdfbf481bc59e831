"""RosterRepository: concrete implementation of RosterRepositoryProtocol.

Teams, players and auction-history records are JSON documents in a single
``entity_documents`` table keyed by (collection, sport, id). All queries use
raw text() SQL (no ORM). Purse and roster changes are single guarded UPDATEs
executed inside the caller's transaction; the caller commits.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sa_common.cents import validate_amount
from src.sa_common.enums import PlayerStatus
from src.sa_common.id_generator import generate_id
from src.sa_roster.domain.models import Player, Team

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_DOCUMENT_SQL = text("""
    SELECT id, sport, body
    FROM entity_documents
    WHERE collection = :collection AND sport = :sport AND id = :id
""")

_LIST_TEAMS_SQL = text("""
    SELECT id, sport, body
    FROM entity_documents
    WHERE collection = 'teams' AND sport = :sport AND id = ANY(:team_ids)
""")

# Guarded: the purse never goes negative. No row returned -> nothing changed.
_DEBIT_PURSE_SQL = text("""
    UPDATE entity_documents
    SET body = jsonb_set(
            jsonb_set(
                body,
                '{purse_remaining_cents}',
                to_jsonb(CAST(body->>'purse_remaining_cents' AS BIGINT) - :amount)
            ),
            '{player_ids}',
            COALESCE(body->'player_ids', CAST('[]' AS JSONB)) || to_jsonb(CAST(:player_id AS TEXT))
        ),
        updated_at = NOW()
    WHERE collection = 'teams' AND sport = :sport AND id = :team_id
      AND CAST(body->>'purse_remaining_cents' AS BIGINT) >= :amount
    RETURNING id
""")

_PATCH_PLAYER_SQL = text("""
    UPDATE entity_documents
    SET body = body || CAST(:patch AS JSONB),
        updated_at = NOW()
    WHERE collection = 'players' AND sport = :sport AND id = :player_id
""")

_INSERT_DOCUMENT_SQL = text("""
    INSERT INTO entity_documents (collection, sport, id, body)
    VALUES (:collection, :sport, :id, CAST(:body AS JSONB))
    ON CONFLICT (collection, sport, id) DO NOTHING
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _body(row: Any) -> dict[str, Any]:
    body = row.body
    if isinstance(body, str):
        body = json.loads(body)
    return dict(body)


def _row_to_team(row: Any) -> Team:
    body = _body(row)
    return Team(
        id=row.id,
        sport=row.sport,
        name=body["name"],
        purse_remaining_cents=int(body["purse_remaining_cents"]),
        total_purse_cents=int(body.get("total_purse_cents", body["purse_remaining_cents"])),
        player_ids=list(body.get("player_ids", [])),
        logo_url=body.get("logo_url"),
    )


def _row_to_player(row: Any) -> Player:
    body = _body(row)
    return Player(
        id=row.id,
        sport=row.sport,
        name=body["name"],
        role=body.get("role", ""),
        base_price_cents=int(body.get("base_price_cents", 0)),
        status=body.get("status", PlayerStatus.AVAILABLE.value),
        sold_price_cents=body.get("sold_price_cents"),
        team_id=body.get("team_id"),
        image_url=body.get("image_url"),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RosterRepository:
    async def get_team(self, db: AsyncSession, sport: str, team_id: str) -> Team | None:
        result = await db.execute(
            _GET_DOCUMENT_SQL, {"collection": "teams", "sport": sport, "id": team_id}
        )
        row = result.fetchone()
        return _row_to_team(row) if row else None

    async def list_teams(
        self, db: AsyncSession, sport: str, team_ids: list[str]
    ) -> list[Team]:
        if not team_ids:
            return []
        result = await db.execute(_LIST_TEAMS_SQL, {"sport": sport, "team_ids": team_ids})
        by_id = {row.id: _row_to_team(row) for row in result.fetchall()}
        # Keep the session's configured team order
        return [by_id[tid] for tid in team_ids if tid in by_id]

    async def get_player(
        self, db: AsyncSession, sport: str, player_id: str
    ) -> Player | None:
        result = await db.execute(
            _GET_DOCUMENT_SQL, {"collection": "players", "sport": sport, "id": player_id}
        )
        row = result.fetchone()
        return _row_to_player(row) if row else None

    async def record_sale(
        self,
        db: AsyncSession,
        sport: str,
        team_id: str,
        player_id: str,
        amount_cents: int,
    ) -> bool:
        """Debit the winning team's purse and mark the player SOLD.

        Returns False without touching the player when the purse guard fails.
        """
        validate_amount(amount_cents)
        result = await db.execute(
            _DEBIT_PURSE_SQL,
            {
                "sport": sport,
                "team_id": team_id,
                "player_id": player_id,
                "amount": amount_cents,
            },
        )
        if result.fetchone() is None:
            return False
        patch = {
            "status": PlayerStatus.SOLD.value,
            "sold_price_cents": amount_cents,
            "team_id": team_id,
        }
        await db.execute(
            _PATCH_PLAYER_SQL,
            {"sport": sport, "player_id": player_id, "patch": json.dumps(patch)},
        )
        return True

    async def record_unsold(self, db: AsyncSession, sport: str, player_id: str) -> None:
        patch = {"status": PlayerStatus.UNSOLD.value}
        await db.execute(
            _PATCH_PLAYER_SQL,
            {"sport": sport, "player_id": player_id, "patch": json.dumps(patch)},
        )

    async def save_auction_result(
        self, db: AsyncSession, sport: str, record: dict[str, Any]
    ) -> None:
        await db.execute(
            _INSERT_DOCUMENT_SQL,
            {
                "collection": "auction_history",
                "sport": sport,
                "id": record.get("id") or generate_id("hist_"),
                "body": json.dumps(record, default=str),
            },
        )
