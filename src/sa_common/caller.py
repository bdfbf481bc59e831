"""Caller identity passed explicitly into every live auction operation."""

from dataclasses import dataclass

from src.sa_common.enums import UserRole


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str
    name: str = ""

    @property
    def is_auctioneer(self) -> bool:
        return self.role == UserRole.AUCTIONEER.value
