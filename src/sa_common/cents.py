"""Integer arithmetic utilities for cents-based auction amounts.

All prices, increments, purses and bids use int (cents). No float, no Decimal.
"""


def validate_amount(amount: int) -> None:
    """Validate that an amount is a non-negative whole number of cents."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer number of cents, got {amount!r}")
    if amount < 0:
        raise ValueError(f"Amount must be >= 0 cents, got {amount}")


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 525 -> '5.25', 123456 -> '1,234.56'."""
    if cents < 0:
        abs_cents = -cents
        return f"-{abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"{cents // 100:,}.{cents % 100:02d}"
