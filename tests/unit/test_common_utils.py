"""Tests for sa_common cents, id_generator and datetime_utils."""

from datetime import UTC, datetime

import pytest

from src.sa_common.cents import cents_to_display, validate_amount
from src.sa_common.datetime_utils import parse_utc, utc_now
from src.sa_common.id_generator import IdGenerator, generate_id


class TestCents:
    def test_display(self) -> None:
        assert cents_to_display(525) == "5.25"
        assert cents_to_display(123456) == "1,234.56"
        assert cents_to_display(0) == "0.00"
        assert cents_to_display(-150) == "-1.50"

    def test_validate_amount(self) -> None:
        validate_amount(0)
        validate_amount(1025)

    @pytest.mark.parametrize("bad", [-1, 10.5, True, "100"])
    def test_validate_amount_rejects(self, bad: object) -> None:
        with pytest.raises(ValueError):
            validate_amount(bad)  # type: ignore[arg-type]


class TestIds:
    def test_unique_and_increasing(self) -> None:
        gen = IdGenerator(node_id=1)
        ids = [gen.next_int() for _ in range(5000)]
        assert ids == sorted(set(ids))

    def test_prefix(self) -> None:
        assert generate_id("bid_").startswith("bid_")

    def test_node_id_range(self) -> None:
        with pytest.raises(ValueError):
            IdGenerator(node_id=1024)


class TestDatetime:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo == UTC

    def test_parse_round_trip(self) -> None:
        ts = datetime(2026, 3, 1, 12, 0, 30, tzinfo=UTC)
        assert parse_utc(ts.isoformat()) == ts

    def test_parse_naive_as_utc(self) -> None:
        assert parse_utc("2026-03-01T12:00:00") == datetime(2026, 3, 1, 12, tzinfo=UTC)

    def test_parse_empty(self) -> None:
        assert parse_utc(None) is None
        assert parse_utc("") is None
