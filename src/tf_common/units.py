"""Integer arithmetic utilities for micro-USDT amounts.

All balances, amounts and rates use int micros (1 USDT = 1_000_000 micros,
the native 6-decimal precision of USDT). No float on the money path.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

MICROS_PER_USDT = 1_000_000
VIEWS_PER_SPONSOR_UNIT = 1_000        # sponsor price is quoted per 1k views
VIEWS_PER_EARNING_UNIT = 100_000      # creator rate is quoted per 100k views
# Largest accepted request amount; balances are BIGINT micros
MAX_AMOUNT_USDT = Decimal("9000000000000")


def usdt_to_micros(value: Decimal | str | int) -> int:
    """Convert a USDT amount to micros. Rejects more than 6 decimal places."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    micros = amount * MICROS_PER_USDT
    if micros != micros.to_integral_value():
        raise ValueError(f"At most 6 decimal places allowed, got {value}")
    return int(micros)


def micros_to_display(micros: int, places: int = 2) -> str:
    """Convert micros to display string: 1_500_000 -> '1.50 USDT'.

    Truncates (never rounds up) to `places` decimals.
    """
    quantum = Decimal(1).scaleb(-places)
    value = (Decimal(micros) / MICROS_PER_USDT).quantize(quantum, rounding=ROUND_DOWN)
    return f"{value:,} USDT"


def sponsor_view_boost(amount_micros: int, price_per_1k_micros: int) -> int:
    """Views bought by a sponsorship: floor(amount / pricePer1k * 1000)."""
    if price_per_1k_micros <= 0:
        raise ValueError("Sponsor price per 1k views must be positive")
    return amount_micros * VIEWS_PER_SPONSOR_UNIT // price_per_1k_micros


def estimate_earnings(total_views: int, rate_per_100k_micros: int) -> int:
    """Estimated creator earnings in micros: views / 100k * rate (floored)."""
    if total_views <= 0 or rate_per_100k_micros <= 0:
        return 0
    return total_views * rate_per_100k_micros // VIEWS_PER_EARNING_UNIT
