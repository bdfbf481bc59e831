"""Unit tests for LiveAuctionService: results instead of exceptions."""

import pytest
from sqlalchemy.exc import OperationalError
from unittest.mock import AsyncMock

from src.sa_live_auction.application.schemas import StartSessionRequest
from src.sa_live_auction.application.service import LiveAuctionService


@pytest.fixture
def service(engine) -> LiveAuctionService:
    return LiveAuctionService(engine)


def _start_body(**overrides) -> StartSessionRequest:
    data = {
        "auction_id": "auction-2026",
        "sport": "cricket",
        "name": "Premier League Draft",
        "team_ids": ["team-a", "team-b", "team-c"],
        "player_pool": ["p1", "p2", "p3"],
    }
    data.update(overrides)
    return StartSessionRequest(**data)


async def _start_live(service, db, auctioneer) -> str:
    result = await service.start_session(auctioneer, _start_body())
    sid = result.data["session"]["id"]
    await service.select_player(db, auctioneer, sid, "p1", "Arjun Rao", 1000)
    await service.start_bidding(db, auctioneer, sid)
    return sid


class TestCommandResults:
    async def test_start_session_payload(self, service, auctioneer) -> None:
        result = await service.start_session(auctioneer, _start_body())
        assert result.success is True
        session = result.data["session"]
        assert session["auctioneer_name"] == "Meera"  # from the caller's token name
        assert session["timer_duration"] == 20
        assert session["bid_slabs"][-1]["max_price_cents"] is None

    async def test_unauthorized_is_a_result(self, service, db, viewer) -> None:
        result = await service.confirm_bid(db, viewer, None, "team-a", None)
        assert result.success is False
        assert result.error_kind == "Unauthorized"
        assert result.http_status == 403
        assert result.error_code == 1001

    async def test_bid_payload(self, service, db, auctioneer) -> None:
        sid = await _start_live(service, db, auctioneer)
        result = await service.confirm_bid(db, auctioneer, sid, "team-a", None)
        assert result.success is True
        assert result.data["bid"]["bid_amount_cents"] == 1025
        assert result.data["bid"]["bid_amount_display"] == "10.25"

    async def test_invalid_jump_amount(self, service, db, auctioneer) -> None:
        sid = await _start_live(service, db, auctioneer)
        result = await service.submit_jump_bid(db, auctioneer, sid, "team-a", None, 1030)
        assert result.success is False
        assert result.error_kind == "InvalidBidAmount"
        assert result.http_status == 422

    async def test_sold_payload(self, service, db, auctioneer) -> None:
        sid = await _start_live(service, db, auctioneer)
        await service.confirm_bid(db, auctioneer, sid, "team-c", None)
        result = await service.mark_sold(db, auctioneer, sid)
        assert result.success is True
        assert result.data["result"]["status"] == "SOLD"
        assert result.data["result"]["bid_count"] == 1

    async def test_no_bids_kind(self, service, db, auctioneer) -> None:
        sid = await _start_live(service, db, auctioneer)
        result = await service.mark_sold(db, auctioneer, sid)
        assert result.error_kind == "NoBidsPlaced"

    async def test_storage_failure_becomes_internal_error(
        self, service, db, auctioneer
    ) -> None:
        sid = await _start_live(service, db, auctioneer)
        db.commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("gone")))
        result = await service.confirm_bid(db, auctioneer, sid, "team-a", None)
        assert result.success is False
        assert result.error_kind == "Internal"
        assert result.http_status == 500

    async def test_end_session_summary(self, service, db, auctioneer) -> None:
        sid = await _start_live(service, db, auctioneer)
        result = await service.end_session(db, auctioneer, sid)
        assert result.success is True
        assert result.data["summary"]["session_id"] == sid


class TestReads:
    async def test_state_without_session(self, service, db, viewer) -> None:
        result = await service.get_state(db, viewer, None)
        assert result.success is True
        assert result.data["has_active_auction"] is False
        assert result.data["ledger"] is None

    async def test_viewer_sees_latest_session(self, service, db, auctioneer, viewer, clock) -> None:
        sid = await _start_live(service, db, auctioneer)
        await service.confirm_bid(db, auctioneer, sid, "team-a", None)
        clock.advance(4.2)

        result = await service.get_state(db, viewer, None)

        state = result.data
        assert state["has_active_auction"] is True
        assert state["session"]["id"] == sid
        assert state["poll_interval_ms"] == 1000
        assert state["ledger"]["state"] == "LIVE"
        assert state["ledger"]["current_bid_cents"] == 1025
        assert state["time_remaining"] == 16  # 15.8s rounds up
        assert state["is_timer_running"] is True
        assert state["next_valid_bid_cents"] == 1075
        assert state["current_increment_cents"] == 50
        assert [t["id"] for t in state["teams"]] == ["team-a", "team-b", "team-c"]
        assert state["current_player"]["name"] == "Arjun Rao"

    async def test_paused_state_reports_frozen_time(
        self, service, db, auctioneer, viewer, clock
    ) -> None:
        sid = await _start_live(service, db, auctioneer)
        clock.advance(5)
        await service.pause_bidding(db, auctioneer, sid)
        clock.advance(60)
        state = (await service.get_state(db, viewer, sid)).data
        assert state["time_remaining"] == 15
        assert state["is_timer_running"] is False

    async def test_repeated_polls_return_same_ledger(
        self, service, db, auctioneer, viewer, clock
    ) -> None:
        sid = await _start_live(service, db, auctioneer)
        await service.confirm_bid(db, auctioneer, sid, "team-a", None)

        first = (await service.get_state(db, viewer, sid)).data
        clock.advance(3)
        second = (await service.get_state(db, viewer, sid)).data

        assert second["ledger"] == first["ledger"]
        assert second["session"] == first["session"]
        assert second["teams"] == first["teams"]
        assert second["time_remaining"] == first["time_remaining"] - 3

    async def test_state_for_unknown_session(self, service, db, viewer) -> None:
        state = (await service.get_state(db, viewer, "las_missing")).data
        assert state["has_active_auction"] is False

    async def test_player_history(self, service, db, auctioneer, viewer) -> None:
        sid = await _start_live(service, db, auctioneer)
        await service.confirm_bid(db, auctioneer, sid, "team-a", None)
        await service.confirm_bid(db, auctioneer, sid, "team-c", None)
        result = await service.get_player_history(viewer, sid, "p1")
        assert result.success is True
        assert [b["team_id"] for b in result.data["history"]] == ["team-a", "team-c"]
