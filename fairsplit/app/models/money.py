"""
models/money.py — Fixed-precision currency value.

Money stores an integer number of minor units (cents). All ledger arithmetic
happens on these integers; Decimal only appears at the API boundary and
float never appears at all.

Key design points:
  - Frozen + ordered dataclass: instances are hashable, comparable, immutable.
  - from_decimal() REJECTS more than 2 decimal places — it never rounds.
    round_half_up() is the one sanctioned rounding entry point and is used
    only for custom contributions, which may legitimately carry sub-cent
    precision (see services/split_service.py).
  - No business logic. No imports from services or routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def _coerce_decimal(value: Decimal | str | int) -> Decimal:
    """Converts str/int/Decimal to a finite Decimal. Floats are rejected."""
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError("Money cannot be built from float or bool; use Decimal or str.")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (str, int)):
        try:
            result = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"{value!r} is not a valid monetary amount.") from exc
    else:
        raise TypeError(f"Unsupported monetary type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"{value!r} is not a finite monetary amount.")
    return result


def _quantize(amount: Decimal, value, rounding: str | None = None) -> Decimal:
    """amount.quantize(CENT), raising ValueError when the result exceeds Decimal precision."""
    try:
        return amount.quantize(CENT, rounding=rounding)
    except InvalidOperation as exc:
        raise ValueError(f"{value!r} is too large to be a monetary amount.") from exc


@dataclass(frozen=True, order=True)
class Money:
    cents: int

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError("Money.cents must be an int.")

    # ── Construction ───────────────────────────────────────────────────────

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def from_decimal(cls, value: Decimal | str | int) -> Money:
        """
        Exact conversion. Raises ValueError if value has more than 2 decimal
        places (e.g. "10.005"); "10.100" is accepted because it is exactly 10.10.
        """
        amount = _coerce_decimal(value)
        if amount != _quantize(amount, value):
            raise ValueError(f"{value!r} has more than 2 decimal places.")
        return cls(int(amount.scaleb(2)))

    @classmethod
    def round_half_up(cls, value: Decimal | str | int) -> Money:
        """Rounds to the nearest cent, halves away from zero."""
        amount = _quantize(_coerce_decimal(value), value, rounding=ROUND_HALF_UP)
        return cls(int(amount.scaleb(2)))

    # ── Conversion ─────────────────────────────────────────────────────────

    def to_decimal(self) -> Decimal:
        """Decimal with exactly 2 places, e.g. Money(1000) -> Decimal("10.00")."""
        return Decimal(self.cents).scaleb(-2)

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f"Money('{self}')"

    # ── Arithmetic ─────────────────────────────────────────────────────────

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents + other.cents)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents - other.cents)

    def __neg__(self) -> Money:
        return Money(-self.cents)

    def __abs__(self) -> Money:
        return Money(abs(self.cents))

    @property
    def is_positive(self) -> bool:
        return self.cents > 0

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    @property
    def is_zero(self) -> bool:
        return self.cents == 0


def total(amounts) -> Money:
    """sum() for Money — the builtin would start from int 0."""
    result = Money.zero()
    for amount in amounts:
        result = result + amount
    return result
