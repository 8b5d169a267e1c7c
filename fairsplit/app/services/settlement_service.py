"""
services/settlement_service.py — Settlement resolver.

Turns net balances into an ordered list of transfer instructions using greedy
cash-flow reduction:

  1. Split participants into creditors (net > 0) and debtors (net < 0);
     zero balances take no part.
  2. Pick the creditor owed the most and the debtor owing the most. Ties are
     broken by name, lexically ascending, so the output is fully determined
     by the input.
  3. Transfer t = min(credit, debt) from that debtor to that creditor.
  4. Drop whoever reached exactly zero; repeat until a side is empty.

Every step retires at least one participant and the last step retires two,
so a group of N participants needs at most N - 1 transfers. This is a
heuristic: it is not guaranteed to be the global minimum.

Whatever is left once a side is empty is a residual. A residual of at most
one cent per participant is dropped with a warning. Anything larger means the
balances did not sum to zero, an internal invariant breach (corrupt ledger
input): it is logged and raised as UNBALANCED.

Layer rules:
  - No Flask imports. Pure function of its input; no store access.
"""

from __future__ import annotations

import logging
from typing import Mapping

from fairsplit.app.errors import AppError, ErrorCode
from fairsplit.app.models.money import Money
from fairsplit.app.models.settlement import Balance, Settlement

logger = logging.getLogger(__name__)

RESIDUAL_TOLERANCE_CENTS = 1


def _pick_largest(remaining: dict[str, int]) -> str:
    """Name with the largest remaining amount; ties go to the lexically smallest name."""
    return min(remaining, key=lambda name: (-remaining[name], name))


def compute_settlements(balances: Mapping[str, Balance | Money]) -> list[Settlement]:
    """
    Greedy minimum cash flow settlement.

    Args:
        balances: {participant: Balance} from compute_balances(), or
                  {participant: Money} net balances. MUST sum to zero.

    Returns:
        Ordered list of Settlement(from_participant, to_participant, amount).
        An empty list means everyone is already square.

    Raises:
        AppError(UNBALANCED, 500) — a residual of more than one cent remains.
    """
    nets: dict[str, int] = {}
    for name, value in balances.items():
        net = value.net_balance if isinstance(value, Balance) else value
        nets[name] = net.cents

    # Remaining amounts are kept positive on both sides.
    credit = {name: cents for name, cents in nets.items() if cents > 0}
    debt = {name: -cents for name, cents in nets.items() if cents < 0}

    transfers: list[Settlement] = []

    while credit and debt:
        creditor = _pick_largest(credit)
        debtor = _pick_largest(debt)
        amount = min(credit[creditor], debt[debtor])

        transfers.append(Settlement(
            from_participant=debtor,
            to_participant=creditor,
            amount=Money(amount),
        ))

        credit[creditor] -= amount
        debt[debtor] -= amount

        if credit[creditor] == 0:
            del credit[creditor]
        if debt[debtor] == 0:
            del debt[debtor]

    leftovers = {name: cents for name, cents in credit.items()}
    leftovers.update({name: -cents for name, cents in debt.items()})
    beyond = {name: cents for name, cents in leftovers.items()
              if abs(cents) > RESIDUAL_TOLERANCE_CENTS}

    if beyond:
        logger.error(
            "Settlement left unresolved balances %s after %d transfers",
            {name: str(Money(cents)) for name, cents in leftovers.items()},
            len(transfers),
        )
        raise AppError(
            ErrorCode.UNBALANCED,
            "Balances do not sum to zero; settlement cannot be resolved. "
            f"Unresolved: {', '.join(f'{n}={Money(c)}' for n, c in beyond.items())}.",
            500,
        )

    if leftovers:
        logger.warning(
            "Settlement dropped residual balances within %d cent: %s",
            RESIDUAL_TOLERANCE_CENTS,
            {name: str(Money(cents)) for name, cents in leftovers.items()},
        )

    return transfers
