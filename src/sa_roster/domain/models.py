"""Domain models for sa_roster: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field


@dataclass
class Team:
    id: str
    sport: str
    name: str
    purse_remaining_cents: int
    total_purse_cents: int
    player_ids: list[str] = field(default_factory=list)
    logo_url: str | None = None

    def can_afford(self, amount_cents: int) -> bool:
        return self.purse_remaining_cents >= amount_cents


@dataclass
class Player:
    id: str
    sport: str
    name: str
    role: str
    base_price_cents: int
    status: str = "AVAILABLE"
    sold_price_cents: int | None = None
    team_id: str | None = None
    image_url: str | None = None
