"""Session store Protocol: where committed session snapshots are kept.

The engine keeps sessions in memory; this store lets it rebuild them after a
restart. Unit tests inject an in-memory fake.
"""

from typing import Protocol

from src.sa_live_auction.domain.session import LiveAuctionSession


class LiveSessionStoreProtocol(Protocol):
    async def save(self, session: LiveAuctionSession) -> None: ...

    async def mark_latest(self, session: LiveAuctionSession) -> None: ...

    async def load(self, session_id: str) -> LiveAuctionSession | None: ...

    async def delete(self, session: LiveAuctionSession) -> None: ...

    async def find_session_id_by_auctioneer(self, auctioneer_id: str) -> str | None: ...

    async def latest_session_id(self) -> str | None: ...
