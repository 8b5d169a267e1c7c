"""
services/expense_service.py — Ledger admission and listing.

Rules enforced here before an expense is admitted:
  GROUP_NOT_FOUND (404)        — group must exist (and not be deleted meanwhile)
  INVALID_DESCRIPTION (422)    — description non-empty after trim
  INVALID_AMOUNT (422)         — amount > 0, at most 2 decimal places
  FUTURE_DATE (422)            — expense date must not be after today
  UNKNOWN_PARTICIPANT (422)    — payer / contribution keys must be participants
  CONTRIBUTIONS_MISMATCH (422) — custom contributions must add up to the amount

A rejected expense is never stored: every check runs before Ledger.append(),
and append() is a single tuple swap.

Concurrency: validation + append run under the group's ledger write lock, so
appends to one group are linearised. Listing takes an unlocked snapshot.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives plain values and a LedgerStore; returns model objects or raises AppError.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from fairsplit.app.errors import AppError, ErrorCode, group_not_found
from fairsplit.app.models.expense import Expense, SplitType
from fairsplit.app.models.money import Money, total
from fairsplit.app.services.split_service import compute_shares
from fairsplit.app.store import Ledger, LedgerStore, new_id

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _get_ledger_or_404(group_id: str, store: LedgerStore) -> Ledger:
    """Returns the group's Ledger or raises GROUP_NOT_FOUND (404)."""
    ledger = store.get(group_id)
    if ledger is None:
        raise group_not_found(group_id)
    return ledger


def _to_money(amount: Money | Decimal | str | int) -> Money:
    """Converts a boundary amount to Money, reporting bad values as INVALID_AMOUNT."""
    if isinstance(amount, Money):
        return amount
    try:
        return Money.from_decimal(amount)
    except (TypeError, ValueError) as exc:
        raise AppError(
            ErrorCode.INVALID_AMOUNT,
            f"Amount {amount!r} is not a valid monetary value: {exc}",
            422,
            field="amount",
        ) from exc


def _validate_description(description: str) -> str:
    cleaned = (description or "").strip()
    if not cleaned:
        raise AppError(
            ErrorCode.INVALID_DESCRIPTION,
            "Description must not be blank.",
            422,
            field="description",
        )
    return cleaned


def _validate_date(expense_date: date | None, today: date) -> date:
    """Defaults a missing date to today; rejects dates after today."""
    if expense_date is None:
        return today
    if expense_date > today:
        raise AppError(
            ErrorCode.FUTURE_DATE,
            f"Expense date {expense_date.isoformat()} is in the future.",
            422,
            field="date",
        )
    return expense_date


# ── Public service functions ───────────────────────────────────────────────

def add_expense(
        group_id: str,
        data: dict,
        store: LedgerStore,
        today: date | None = None,
) -> Expense:
    """
    Validates and appends a new expense to a group's ledger.

    Args:
        group_id: The owning group.
        data:     Validated dict from CreateExpenseSchema:
                  description, amount (Decimal), paid_by, date (optional),
                  contributions (optional {name: Decimal}).
        store:    The application's LedgerStore.
        today:    Reference date for the future-date check (defaults to today).

    Returns:
        The admitted Expense.
    """
    ledger = _get_ledger_or_404(group_id, store)
    today = today or date.today()

    description = _validate_description(data.get("description", ""))
    amount = _to_money(data.get("amount"))
    expense_date = _validate_date(data.get("date"), today)
    paid_by: str = data.get("paid_by", "")
    contributions = data.get("contributions") or None

    with ledger.write_lock():
        # The group may have been deleted between lookup and lock acquisition.
        if ledger.closed:
            raise group_not_found(group_id)

        participants = ledger.group.participants
        shares = compute_shares(
            amount,
            participants,
            contributions=contributions,
            paid_by=paid_by,
        )

        expense = Expense(
            expense_id=new_id(),
            group_id=group_id,
            description=description,
            amount=amount,
            paid_by=paid_by,
            date=expense_date,
            shares=shares,
            split_type=SplitType.CUSTOM if contributions else SplitType.EQUAL,
            created_at=datetime.now(timezone.utc),
        )
        ledger.append(expense)

    logger.info(
        "Expense %s appended to group %s: %s paid %s (%s split)",
        expense.expense_id, group_id, paid_by, amount, expense.split_type.value,
    )
    return expense


def list_expenses(group_id: str, store: LedgerStore) -> tuple[Expense, ...]:
    """
    Returns every expense of a group in insertion order.

    The result is an immutable snapshot: later appends do not change it, and
    it can be iterated any number of times.
    """
    return _get_ledger_or_404(group_id, store).snapshot()


def total_expense(ledger: Ledger) -> Money:
    """Sum of all expense amounts in a ledger snapshot."""
    return total(e.amount for e in ledger.snapshot())
