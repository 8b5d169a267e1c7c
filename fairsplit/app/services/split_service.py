"""
services/split_service.py — Split calculator.

Turns one expense's amount + the group's participants (+ optional custom
contributions) into an exact participant -> Money share mapping.

Guarantees (for every successful call):
  - keys == participants, in declared order
  - sum(values) == amount exactly, to the cent
  - every value >= 0

Equal split:
  Integer division of the cent amount. The remainder cents go one each to the
  first `remainder` participants in declared order, so the result depends on
  participant order and nothing else. 10.00 / 3 -> 3.34, 3.33, 3.33.

Custom split:
  Contributions may carry sub-cent precision (e.g. 10 / 3 typed as 3.333).
  Their exact sum must be within strictly less than one cent of the amount;
  29.99 against 30.00 is rejected. Each value is rounded half-up to cents and
  the cents lost or gained by rounding are absorbed by the largest shares.

Layer rules:
  - No Flask imports. Pure functions, no store access, no side effects.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Sequence

from fairsplit.app.errors import AppError, ErrorCode
from fairsplit.app.models.money import CENT, Money, total

# Custom contributions must sum to within strictly less than this of the amount.
CONTRIBUTION_TOLERANCE = CENT


# ── Private helpers ────────────────────────────────────────────────────────

def _validate_amount(amount: Money) -> None:
    """Raises INVALID_AMOUNT (422) unless amount > 0."""
    if not amount.is_positive:
        raise AppError(
            ErrorCode.INVALID_AMOUNT,
            f"Amount must be greater than zero (got {amount}).",
            422,
            field="amount",
        )


def _validate_payer(paid_by: str, participants: Sequence[str]) -> None:
    if paid_by not in participants:
        raise AppError(
            ErrorCode.UNKNOWN_PARTICIPANT,
            f"Payer {paid_by!r} is not a participant of this group.",
            422,
            field="paidBy",
        )


def _as_decimal(value: Money | Decimal | int | str) -> Decimal:
    if isinstance(value, Money):
        return value.to_decimal()
    if isinstance(value, float):
        raise TypeError("Contributions must be Decimal or Money, never float.")
    return Decimal(value)


def _compute_equal_shares(amount: Money, participants: Sequence[str]) -> dict[str, Money]:
    """
    Canonical equal split. Remainder cents go to the first participants in
    declared order. Shares differ from each other by at most one cent.
    """
    base, remainder = divmod(amount.cents, len(participants))
    return {
        name: Money(base + 1 if index < remainder else base)
        for index, name in enumerate(participants)
    }


def _absorb_residual(
        shares: dict[str, Money],
        residual_cents: int,
        participants: Sequence[str],
) -> dict[str, Money]:
    """
    Moves `residual_cents` (positive: add, negative: remove) across the shares,
    one cent at a time, largest share first, ties broken by declared order.
    A share is never taken below zero.
    """
    if residual_cents == 0:
        return shares

    position = {name: index for index, name in enumerate(participants)}
    step = 1 if residual_cents > 0 else -1
    remaining = abs(residual_cents)
    cents = {name: money.cents for name, money in shares.items()}

    while remaining:
        order = sorted(participants, key=lambda n: (-cents[n], position[n]))
        for name in order:
            if remaining == 0:
                break
            if step < 0 and cents[name] == 0:
                continue
            cents[name] += step
            remaining -= 1

    return {name: Money(cents[name]) for name in participants}


def _compute_custom_shares(
        amount: Money,
        participants: Sequence[str],
        contributions: Mapping[str, Money | Decimal],
) -> dict[str, Money]:
    for name in contributions:
        if name not in participants:
            raise AppError(
                ErrorCode.UNKNOWN_PARTICIPANT,
                f"Contribution given for {name!r}, who is not a participant of this group.",
                422,
                field="contributions",
            )

    missing = [name for name in participants if name not in contributions]
    if missing:
        raise AppError(
            ErrorCode.CONTRIBUTIONS_MISMATCH,
            f"Contributions are missing for: {', '.join(missing)}.",
            422,
            field="contributions",
        )

    exact = {name: _as_decimal(contributions[name]) for name in participants}

    for name, value in exact.items():
        if not value.is_finite() or value < 0:
            raise AppError(
                ErrorCode.INVALID_AMOUNT,
                f"Contribution for {name!r} must be zero or greater (got {value}).",
                422,
                field="contributions",
            )

    exact_sum = sum(exact.values(), Decimal("0"))
    if abs(exact_sum - amount.to_decimal()) >= CONTRIBUTION_TOLERANCE:
        raise AppError(
            ErrorCode.CONTRIBUTIONS_MISMATCH,
            f"Contributions sum to {exact_sum}, which does not match the "
            f"expense amount {amount}.",
            422,
            field="contributions",
        )

    rounded = {name: Money.round_half_up(value) for name, value in exact.items()}
    residual = amount.cents - total(rounded.values()).cents
    return _absorb_residual(rounded, residual, participants)


# ── Public API ─────────────────────────────────────────────────────────────

def compute_shares(
        amount: Money,
        participants: Sequence[str],
        contributions: Mapping[str, Money | Decimal] | None = None,
        paid_by: str | None = None,
) -> dict[str, Money]:
    """
    Computes the per-participant shares of one expense.

    Args:
        amount:        Expense total. Must be > 0.
        participants:  The group's participants, in declared order.
        contributions: Optional custom split. None or empty means equal split.
        paid_by:       Optional payer; validated as a participant when given.

    Raises:
        AppError(INVALID_AMOUNT, 422)          — amount <= 0 or a negative contribution
        AppError(UNKNOWN_PARTICIPANT, 422)     — payer or contribution key not in group
        AppError(CONTRIBUTIONS_MISMATCH, 422)  — missing contribution or sum off by >= 1 cent
    """
    _validate_amount(amount)
    if not participants:
        raise AppError(
            ErrorCode.EMPTY_PARTICIPANT_LIST,
            "Cannot split an expense among zero participants.",
            422,
            field="participants",
        )
    if paid_by is not None:
        _validate_payer(paid_by, participants)

    if contributions:
        shares = _compute_custom_shares(amount, participants, contributions)
    else:
        shares = _compute_equal_shares(amount, participants)

    # Must always hold; a failure here is a programming error.
    computed = total(shares.values())
    if computed != amount:
        raise AppError(
            ErrorCode.INTERNAL_ERROR,
            f"Split computation produced sum {computed} for amount {amount}. "
            f"This is a bug — please report it.",
            500,
        )
    return shares
