"""
tests/unit/test_split_sum_invariant.py — Whole-ledger invariants over generated data.

What this file proves, for ledgers built from seeded random expenses:
  - every admitted expense has sum(shares) == amount and no negative share
  - sum of all net balances is exactly zero
  - applying the resolved settlements leaves every participant at zero
  - the number of settlements is at most N - 1

random.Random is seeded per case so failures are reproducible.
"""

from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

import pytest

from fairsplit.app.models.money import Money, total
from fairsplit.app.services import balance_service, expense_service, group_service
from fairsplit.app.services.settlement_service import compute_settlements
from fairsplit.app.store import LedgerStore


def _random_contributions(rng: random.Random, cents: int, names: list[str]) -> dict[str, Decimal]:
    """Random non-negative custom split that sums exactly to `cents`."""
    cuts = sorted(rng.randint(0, cents) for _ in range(len(names) - 1))
    parts = [b - a for a, b in zip([0] + cuts, cuts + [cents])]
    return {name: Money(part).to_decimal() for name, part in zip(names, parts)}


@pytest.mark.parametrize("seed", range(20))
def test_random_ledger_invariants(seed):
    rng = random.Random(seed)
    store = LedgerStore()
    names = [f"P{i}" for i in range(rng.randint(1, 10))]
    group = group_service.create_group(f"Random {seed}", names, store)

    for _ in range(rng.randint(0, 40)):
        cents = rng.randint(1, 500_000)
        contributions = (
            _random_contributions(rng, cents, names) if rng.random() < 0.4 else None
        )
        expense = expense_service.add_expense(
            group.group_id,
            {
                "description": "generated",
                "amount": Money(cents).to_decimal(),
                "paid_by": rng.choice(names),
                "date": date(2024, 1, 1),
                "contributions": contributions,
            },
            store,
        )
        assert total(expense.shares.values()) == expense.amount
        assert all(not share.is_negative for share in expense.shares.values())

    balances = balance_service.compute_balances(group.group_id, store)
    assert balance_service.net_sum(balances) == Money.zero()

    transfers = compute_settlements(balances)
    assert len(transfers) <= max(len(names) - 1, 0)

    remaining = {name: b.net_balance for name, b in balances.items()}
    for t in transfers:
        remaining[t.from_participant] += t.amount
        remaining[t.to_participant] -= t.amount
    assert all(v.is_zero for v in remaining.values())
