"""Unit tests for micro-USDT arithmetic."""

from decimal import Decimal

import pytest

from src.tf_common.units import (
    MICROS_PER_USDT,
    estimate_earnings,
    micros_to_display,
    sponsor_view_boost,
    usdt_to_micros,
)


class TestUsdtToMicros:
    def test_whole_amount(self) -> None:
        assert usdt_to_micros(Decimal("100")) == 100 * MICROS_PER_USDT

    def test_six_decimal_places(self) -> None:
        assert usdt_to_micros("0.000001") == 1

    def test_accepts_int_and_str(self) -> None:
        assert usdt_to_micros(50) == 50_000_000
        assert usdt_to_micros("1.5") == 1_500_000

    def test_rejects_seven_decimal_places(self) -> None:
        with pytest.raises(ValueError, match="6 decimal places"):
            usdt_to_micros("0.0000001")

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            usdt_to_micros("ten")

    def test_rejects_infinity(self) -> None:
        with pytest.raises(ValueError):
            usdt_to_micros("Infinity")


class TestDisplay:
    def test_two_places(self) -> None:
        assert micros_to_display(1_500_000) == "1.50 USDT"

    def test_truncates_instead_of_rounding(self) -> None:
        assert micros_to_display(1_999_999) == "1.99 USDT"

    def test_thousands_separator(self) -> None:
        assert micros_to_display(10_000_000_000) == "10,000.00 USDT"

    def test_six_places_for_rates(self) -> None:
        assert micros_to_display(100_000, places=6) == "0.100000 USDT"


class TestSponsorBoost:
    def test_ten_usdt_at_one_per_1k_buys_10k_views(self) -> None:
        assert sponsor_view_boost(10_000_000, 1_000_000) == 10_000

    def test_floors_fractional_views(self) -> None:
        # 0.0015 USDT buys 1.5 views at 1.0/1k
        assert sponsor_view_boost(1_500, 1_000_000) == 1

    def test_rejects_non_positive_price(self) -> None:
        with pytest.raises(ValueError):
            sponsor_view_boost(1_000_000, 0)


class TestEarningsEstimate:
    def test_250k_views_at_point_one(self) -> None:
        assert estimate_earnings(250_000, 100_000) == 250_000  # 0.25 USDT

    def test_zero_views(self) -> None:
        assert estimate_earnings(0, 100_000) == 0

    def test_zero_rate(self) -> None:
        assert estimate_earnings(1_000_000, 0) == 0

    def test_floors(self) -> None:
        # 1 view at 0.1/100k = 0.000001 USDT -> 1 micro; 0.5 micro floors to 0
        assert estimate_earnings(1, 100_000) == 1
        assert estimate_earnings(1, 50_000) == 0
