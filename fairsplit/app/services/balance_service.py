"""
services/balance_service.py — Balance aggregation.

This file is the SINGLE SOURCE OF TRUTH for how balances are computed.
The canonical fold must not be reimplemented elsewhere in the codebase.

Balances are always re-derived from a full ledger snapshot, never patched
incrementally. The fold is O(expenses × participants) and uses integer-cent
arithmetic only, so the result is independent of floating-point accumulation
and of anything except the ledger contents.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives group_id (str) and a LedgerStore as arguments.
  - Returns model objects and plain dicts. No locks are taken: readers work
    on an immutable snapshot.

Zero-sum guarantee:
  aggregate_balances() produces sum(net_balance) == 0 whenever every expense
  satisfies sum(shares) == amount (guaranteed by split_service). The
  settlement response checks this before resolving transfers; a non-zero sum
  surfaces as UNBALANCED (500).
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fairsplit.app.errors import AppError, ErrorCode, group_not_found
from fairsplit.app.models.expense import Expense
from fairsplit.app.models.money import Money
from fairsplit.app.models.settlement import Balance
from fairsplit.app.services.settlement_service import compute_settlements
from fairsplit.app.store import Ledger, LedgerStore

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _get_ledger_or_404(group_id: str, store: LedgerStore) -> Ledger:
    """Returns the group's Ledger or raises GROUP_NOT_FOUND (404)."""
    ledger = store.get(group_id)
    if ledger is None:
        raise group_not_found(group_id)
    return ledger


# ── Core algorithm ─────────────────────────────────────────────────────────

def aggregate_balances(
        participants: Sequence[str],
        expenses: Iterable[Expense],
) -> dict[str, Balance]:
    """
    Folds a sequence of expenses into one Balance per participant.

    Algorithm:
      1. Start every participant at zero paid / zero owed, so the result has
         exactly one entry per participant even if they never paid or owe.
      2. Credit each payer with the full expense amount.
      3. Debit each participant with their share.

    Returns {participant: Balance} in declared participant order.
    """
    paid = {name: 0 for name in participants}
    owed = {name: 0 for name in participants}

    for expense in expenses:
        paid[expense.paid_by] += expense.amount.cents
        for name, share in expense.shares.items():
            owed[name] += share.cents

    return {
        name: Balance(
            participant=name,
            total_paid=Money(paid[name]),
            total_owed=Money(owed[name]),
        )
        for name in participants
    }


def compute_balances(group_id: str, store: LedgerStore) -> dict[str, Balance]:
    """
    Canonical balance computation for a group.

    Raises:
        AppError(GROUP_NOT_FOUND, 404) — group does not exist.
    """
    ledger = _get_ledger_or_404(group_id, store)
    return aggregate_balances(ledger.group.participants, ledger.snapshot())


def net_sum(balances: dict[str, Balance]) -> Money:
    return Money(sum(b.net_balance.cents for b in balances.values()))


# ── Response builder ───────────────────────────────────────────────────────

def get_settlement_response(group_id: str, store: LedgerStore) -> dict:
    """
    Builds the payload for GET /groups/:id/settlements:

        {
          "settlements":    [{"from", "to", "amount"}],
          "memberBalances": {name: {"totalPaid", "totalOwed", "netBalance"}},
        }

    Amounts are 2-place Decimals; the JSON provider writes them as numbers.

    Raises:
        AppError(GROUP_NOT_FOUND, 404) — group does not exist.
        AppError(UNBALANCED, 500)      — balances do not sum to zero.
    """
    balances = compute_balances(group_id, store)

    residual = net_sum(balances)
    if not residual.is_zero:
        # Corrupt ledger data, not a client error.
        logger.error(
            "Balance integrity check failed for group %s: sum was %s (expected 0.00)",
            group_id, residual,
        )
        raise AppError(
            ErrorCode.UNBALANCED,
            f"Balance integrity check failed: sum was {residual} (expected 0.00). "
            f"Group {group_id} has inconsistent financial data.",
            500,
        )

    settlements = compute_settlements(balances)

    return {
        "settlements": [
            {
                "from": s.from_participant,
                "to": s.to_participant,
                "amount": s.amount.to_decimal(),
            }
            for s in settlements
        ],
        "memberBalances": {
            name: {
                "totalPaid": b.total_paid.to_decimal(),
                "totalOwed": b.total_owed.to_decimal(),
                "netBalance": b.net_balance.to_decimal(),
            }
            for name, b in balances.items()
        },
    }
