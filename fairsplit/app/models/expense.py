"""
models/expense.py — Expense value object.

No business logic. No imports from services or routes.

Key design points:
  - Expenses are immutable once built. There is no update or delete path;
    corrections are recorded as compensating expenses.
  - `amount` and every share are Money (integer cents) — never float.
  - `shares` is a read-only mapping whose keys are exactly the group's
    participants, in declared order, and whose values sum to `amount`.
    services/split_service.py is the only producer of share mappings.
  - SplitType is a Python enum so schemas, services and routes share one
    definition. Do not duplicate its values as string literals.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Mapping

from fairsplit.app.models.money import Money


class SplitType(str, enum.Enum):
    EQUAL  = "equal"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Expense:
    expense_id: str
    group_id: str
    description: str
    amount: Money
    paid_by: str
    date: date
    shares: Mapping[str, Money]
    split_type: SplitType
    created_at: datetime = field(compare=False)

    def __post_init__(self) -> None:
        # Copy then freeze, so later changes to the caller's dict cannot leak in.
        object.__setattr__(self, "shares", MappingProxyType(dict(self.shares)))

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Expense id={self.expense_id} "
            f"group_id={self.group_id} "
            f"amount={self.amount} "
            f"paid_by={self.paid_by!r}>"
        )
