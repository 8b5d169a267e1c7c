"""
models/settlement.py — Derived balance and transfer values.

Neither type is stored. Both are recomputed on demand from a ledger
snapshot (services/balance_service.py and services/settlement_service.py),
so they have no ids and no lifecycle of their own.
"""

from __future__ import annotations

from dataclasses import dataclass

from fairsplit.app.models.money import Money


@dataclass(frozen=True)
class Balance:
    participant: str
    total_paid: Money
    total_owed: Money

    @property
    def net_balance(self) -> Money:
        """Positive: the group owes this participant. Negative: they owe the group."""
        return self.total_paid - self.total_owed


@dataclass(frozen=True)
class Settlement:
    """One directed payment instruction: debtor pays creditor `amount`."""
    from_participant: str
    to_participant: str
    amount: Money
