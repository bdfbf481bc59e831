"""Bid slab resolution: pure functions, no I/O.

A slab ladder is an ordered list of BidSlab with strictly increasing ceilings;
the last slab may be unbounded (``max_price_cents=None``). For a price, the
applicable slab is the first whose ceiling is >= price. A price above every
ceiling uses the last slab's increment.
"""

from src.sa_common.errors import InvalidSessionConfigError
from src.sa_live_auction.domain.models import BidSlab

DEFAULT_BID_SLABS: tuple[BidSlab, ...] = (
    BidSlab(max_price_cents=1000, increment_cents=25),
    BidSlab(max_price_cents=2000, increment_cents=50),
    BidSlab(max_price_cents=None, increment_cents=100),
)


def validate_slabs(slabs: list[BidSlab]) -> None:
    """Reject ladders the resolver cannot use. Called once at session start."""
    if not slabs:
        raise InvalidSessionConfigError("bid_slabs must not be empty")
    previous: int | None = None
    for index, slab in enumerate(slabs):
        if slab.increment_cents <= 0:
            raise InvalidSessionConfigError(f"slab {index} increment must be > 0")
        if slab.max_price_cents is None:
            if index != len(slabs) - 1:
                raise InvalidSessionConfigError("only the last slab may be unbounded")
            continue
        if previous is not None and slab.max_price_cents <= previous:
            raise InvalidSessionConfigError("slab ceilings must be strictly increasing")
        previous = slab.max_price_cents


def _slab_for(price_cents: int, slabs: list[BidSlab]) -> BidSlab:
    assert slabs, "bid slab ladder must not be empty"
    for slab in slabs:
        if slab.max_price_cents is None or price_cents <= slab.max_price_cents:
            return slab
    return slabs[-1]


def increment_for(price_cents: int, slabs: list[BidSlab]) -> int:
    return _slab_for(price_cents, slabs).increment_cents


def next_bid(current_bid_cents: int, slabs: list[BidSlab]) -> int:
    return current_bid_cents + increment_for(current_bid_cents, slabs)


def is_on_ladder(start_cents: int, amount_cents: int, slabs: list[BidSlab]) -> bool:
    """True if ``amount`` is reachable from ``start`` by repeated next_bid steps.

    Walks one slab band at a time instead of one increment at a time.
    """
    price = start_cents
    while price < amount_cents:
        slab = _slab_for(price, slabs)
        step = slab.increment_cents
        ceiling = slab.max_price_cents
        if ceiling is None or price > ceiling or amount_cents <= ceiling:
            return (amount_cents - price) % step == 0
        # First price past this band's ceiling; the next band takes over from there
        crossing = price + ((ceiling - price) // step + 1) * step
        if amount_cents < crossing:
            return False
        price = crossing
    return price == amount_cents
