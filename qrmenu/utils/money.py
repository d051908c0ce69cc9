"""Money rounding helpers."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def quantize_money(value: Decimal | int | float | str) -> Decimal:
    """Return value as a two-decimal Decimal."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_eur(value: Decimal | int | float) -> str:
    return f"{quantize_money(value):.2f} €"
