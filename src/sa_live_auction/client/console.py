"""AuctioneerConsole: the auctioneer's action surface over HTTP.

Every action returns a bool. On success the console re-fetches the full state
through the poller instead of updating anything optimistically; on failure the
server's message is kept in ``error``.
"""

import logging
from typing import Any

import httpx

from src.sa_common.enums import UserRole
from src.sa_live_auction.client.poller import LiveAuctionPoller

logger = logging.getLogger(__name__)


class AuctioneerConsole:
    def __init__(self, http: httpx.AsyncClient, poller: LiveAuctionPoller, role: str) -> None:
        self._http = http
        self._poller = poller
        self._role = role
        self.error: str | None = None

    @property
    def session_id(self) -> str | None:
        return self._poller.session_id

    async def _command(self, path: str, label: str, body: dict[str, Any] | None = None) -> bool:
        if self._role != UserRole.AUCTIONEER.value:
            self.error = f"Only auctioneers can {label}"
            return False

        payload = dict(body or {})
        if self.session_id and "session_id" not in payload:
            payload["session_id"] = self.session_id
        try:
            resp = await self._http.post(f"/live-auction/{path}", json=payload)
            result = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            self.error = str(exc) or f"Failed to {label}"
            logger.warning("live auction %s failed: %s", path, self.error)
            return False

        if not result.get("success"):
            self.error = result.get("message") or f"Failed to {label}"
            return False

        self.error = None
        data = result.get("data") or {}
        if path == "start":
            self._poller.session_id = data["session"]["id"]
        await self._poller.refresh()
        if path == "end":
            self._poller.session_id = None
        return True

    async def start_session(
        self,
        auction_id: str,
        sport: str,
        name: str,
        team_ids: list[str],
        player_pool: list[str],
        auctioneer_name: str = "",
        bid_slabs: list[dict[str, Any]] | None = None,
        timer_duration: int | None = None,
    ) -> bool:
        body: dict[str, Any] = {
            "auction_id": auction_id,
            "sport": sport,
            "name": name,
            "auctioneer_name": auctioneer_name,
            "team_ids": team_ids,
            "player_pool": player_pool,
        }
        if bid_slabs is not None:
            body["bid_slabs"] = bid_slabs
        if timer_duration is not None:
            body["timer_duration"] = timer_duration
        return await self._command("start", "start sessions", body)

    async def select_player(self, player_id: str, player_name: str, base_price_cents: int) -> bool:
        return await self._command(
            "select-player",
            "select players",
            {"player_id": player_id, "player_name": player_name,
             "base_price_cents": base_price_cents},
        )

    async def start_bidding(self) -> bool:
        return await self._command("start-bidding", "start bidding")

    async def confirm_bid(self, team_id: str, team_name: str | None = None) -> bool:
        return await self._command(
            "bid", "confirm bids", {"team_id": team_id, "team_name": team_name}
        )

    async def submit_jump_bid(
        self, team_id: str, amount_cents: int, team_name: str | None = None
    ) -> bool:
        return await self._command(
            "jump-bid",
            "submit jump bids",
            {"team_id": team_id, "team_name": team_name, "jump_amount_cents": amount_cents},
        )

    async def pause_bidding(self) -> bool:
        return await self._command("pause", "pause bidding")

    async def resume_bidding(self) -> bool:
        return await self._command("resume", "resume bidding")

    async def mark_sold(self) -> bool:
        return await self._command("sold", "mark as sold")

    async def mark_unsold(self) -> bool:
        return await self._command("unsold", "mark as unsold")

    async def end_session(self) -> bool:
        return await self._command("end", "end sessions")

    async def get_player_history(self, player_id: str) -> list[dict[str, Any]]:
        params = {"session_id": self.session_id} if self.session_id else None
        try:
            resp = await self._http.get(f"/live-auction/history/{player_id}", params=params)
            result = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to get player history: %s", exc)
            return []
        if not result.get("success"):
            return []
        return list(result["data"].get("history", []))
