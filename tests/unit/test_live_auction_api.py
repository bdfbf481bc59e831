"""HTTP tests for the /live-auction and /auth routers (in-memory engine, no PG/Redis)."""

import pytest
from httpx import AsyncClient

from src.sa_gateway.auth.jwt_handler import create_access_token

BASE = "/api/v1/live-auction"


def _auth(user_id: str, role: str, name: str = "") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role, name)}"}


AUCTIONEER = _auth("auc-1", "auctioneer", "Meera")
VIEWER = _auth("fan-1", "player", "Ravi")

START_BODY = {
    "auction_id": "auction-2026",
    "sport": "cricket",
    "name": "Premier League Draft",
    "team_ids": ["team-a", "team-b", "team-c"],
    "player_pool": ["p1", "p2", "p3"],
}


async def _start_live(client: AsyncClient) -> str:
    resp = await client.post(f"{BASE}/start", json=START_BODY, headers=AUCTIONEER)
    sid = resp.json()["data"]["session"]["id"]
    await client.post(
        f"{BASE}/select-player",
        json={"session_id": sid, "player_id": "p1", "player_name": "Arjun Rao",
              "base_price_cents": 1000},
        headers=AUCTIONEER,
    )
    await client.post(f"{BASE}/start-bidding", json={"session_id": sid}, headers=AUCTIONEER)
    return sid


class TestAuth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_issue_token(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/token",
            json={"user_id": "auc-1", "role": "auctioneer", "name": "Meera"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["token_type"] == "Bearer"
        assert body["data"]["role"] == "auctioneer"
        assert "request_id" in body

    async def test_unknown_role_rejected(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/token", json={"user_id": "x", "role": "superuser"}
        )
        assert resp.status_code == 422

    async def test_state_requires_token(self, client: AsyncClient) -> None:
        resp = await client.get(f"{BASE}/state")
        assert resp.status_code == 401

    async def test_garbage_token(self, client: AsyncClient) -> None:
        resp = await client.get(f"{BASE}/state", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestAuctionFlow:
    async def test_start_session(self, client: AsyncClient) -> None:
        resp = await client.post(f"{BASE}/start", json=START_BODY, headers=AUCTIONEER)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["session"]["auctioneer_id"] == "auc-1"
        assert body["data"]["session"]["player_pool"] == ["p1", "p2", "p3"]

    async def test_start_twice_conflicts(self, client: AsyncClient) -> None:
        await client.post(f"{BASE}/start", json=START_BODY, headers=AUCTIONEER)
        resp = await client.post(f"{BASE}/start", json=START_BODY, headers=AUCTIONEER)
        assert resp.status_code == 409
        assert resp.json()["code"] == 2001
        assert resp.json()["success"] is False

    async def test_start_validation(self, client: AsyncClient) -> None:
        resp = await client.post(
            f"{BASE}/start", json={**START_BODY, "team_ids": []}, headers=AUCTIONEER
        )
        assert resp.status_code == 422

    async def test_bid_then_sell(self, client: AsyncClient) -> None:
        sid = await _start_live(client)

        resp = await client.post(
            f"{BASE}/bid", json={"session_id": sid, "team_id": "team-a"}, headers=AUCTIONEER
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["bid"]["bid_amount_cents"] == 1025

        resp = await client.post(
            f"{BASE}/jump-bid",
            json={"session_id": sid, "team_id": "team-c", "jump_amount_cents": 1275},
            headers=AUCTIONEER,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["bid"]["is_jump"] is True

        resp = await client.post(f"{BASE}/sold", json={"session_id": sid}, headers=AUCTIONEER)
        assert resp.status_code == 200
        result = resp.json()["data"]["result"]
        assert result["team_id"] == "team-c"
        assert result["final_price_cents"] == 1275

        state = (await client.get(f"{BASE}/state", headers=VIEWER)).json()["data"]
        assert state["ledger"]["state"] == "SOLD"
        assert state["is_timer_running"] is False
        assert state["session"]["completed_player_ids"] == ["p1"]
        team_c = next(t for t in state["teams"] if t["id"] == "team-c")
        assert team_c["purse_remaining_cents"] == 100000 - 1275

    async def test_commands_default_to_own_session(self, client: AsyncClient) -> None:
        await _start_live(client)
        resp = await client.post(f"{BASE}/pause", headers=AUCTIONEER)
        assert resp.status_code == 200
        assert resp.json()["data"]["ledger"]["state"] == "PAUSED"
        resp = await client.post(f"{BASE}/resume", headers=AUCTIONEER)
        assert resp.json()["data"]["ledger"]["state"] == "LIVE"

    async def test_viewer_cannot_bid(self, client: AsyncClient) -> None:
        sid = await _start_live(client)
        resp = await client.post(
            f"{BASE}/bid", json={"session_id": sid, "team_id": "team-a"}, headers=VIEWER
        )
        assert resp.status_code == 403
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == 1001

    async def test_player_not_in_pool(self, client: AsyncClient) -> None:
        await client.post(f"{BASE}/start", json=START_BODY, headers=AUCTIONEER)
        resp = await client.post(
            f"{BASE}/select-player",
            json={"player_id": "p9", "player_name": "Nobody", "base_price_cents": 100},
            headers=AUCTIONEER,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2003

    async def test_invalid_state(self, client: AsyncClient) -> None:
        await _start_live(client)
        resp = await client.post(f"{BASE}/resume", headers=AUCTIONEER)
        assert resp.status_code == 409
        assert "LIVE" in resp.json()["message"]

    async def test_unsold_and_history(self, client: AsyncClient) -> None:
        sid = await _start_live(client)
        await client.post(
            f"{BASE}/bid", json={"session_id": sid, "team_id": "team-b"}, headers=AUCTIONEER
        )
        resp = await client.post(f"{BASE}/unsold", headers=AUCTIONEER)
        assert resp.json()["data"]["result"]["status"] == "UNSOLD"

        resp = await client.get(
            f"{BASE}/history/p1", params={"session_id": sid}, headers=VIEWER
        )
        history = resp.json()["data"]["history"]
        assert [b["team_id"] for b in history] == ["team-b"]

    async def test_end_session(self, client: AsyncClient) -> None:
        await _start_live(client)
        resp = await client.post(f"{BASE}/end", headers=AUCTIONEER)
        assert resp.status_code == 200
        assert resp.json()["data"]["summary"]["unauctioned_player_ids"] == ["p1", "p2", "p3"]
        state = (await client.get(f"{BASE}/state", headers=VIEWER)).json()["data"]
        assert state["has_active_auction"] is False


@pytest.mark.parametrize("path", ["start-bidding", "pause", "resume", "sold", "unsold", "end"])
async def test_commands_without_session(client: AsyncClient, path: str) -> None:
    resp = await client.post(f"{BASE}/{path}", headers=AUCTIONEER)
    assert resp.status_code == 404
    assert resp.json()["code"] == 2002
