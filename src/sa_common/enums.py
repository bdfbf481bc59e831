"""Global enums: values are the wire format used by clients and the store."""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    AUCTIONEER = "auctioneer"
    PLAYER = "player"


class LedgerState(str, Enum):
    READY = "READY"
    LIVE = "LIVE"
    PAUSED = "PAUSED"
    SOLD = "SOLD"
    UNSOLD = "UNSOLD"


class PlayerStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    UP_NEXT = "UP_NEXT"
    SOLD = "SOLD"
    UNSOLD = "UNSOLD"
