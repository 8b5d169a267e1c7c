"""
tests/unit/test_debt_simplification.py — Unit tests for settlement_service.compute_settlements.

What this file proves:
  - Greedy matching pairs the largest creditor with the largest debtor
  - Ties are broken by name, lexically ascending, so output is deterministic
  - At most N - 1 transfers for N participants
  - Applying the transfers brings every balance to exactly zero
  - Zero balances never appear in a transfer
  - A residual of one cent is dropped; anything larger raises UNBALANCED (500)

Unit test constraints:
  - No Flask, no store. Input is {name: Money} net balances.
"""

from __future__ import annotations

import pytest

from fairsplit.app.errors import AppError, ErrorCode
from fairsplit.app.models.money import Money
from fairsplit.app.models.settlement import Balance, Settlement
from fairsplit.app.services.settlement_service import compute_settlements


def _nets(**values: str) -> dict[str, Money]:
    return {name: Money.from_decimal(v) for name, v in values.items()}


def _apply(nets: dict[str, Money], transfers: list[Settlement]) -> dict[str, Money]:
    """Simulates the transfers: the debtor's balance rises, the creditor's falls."""
    result = dict(nets)
    for t in transfers:
        result[t.from_participant] = result[t.from_participant] + t.amount
        result[t.to_participant] = result[t.to_participant] - t.amount
    return result


def _as_tuples(transfers: list[Settlement]) -> list[tuple[str, str, str]]:
    return [(t.from_participant, t.to_participant, str(t.amount)) for t in transfers]


# ═══════════════════════════════════════════════════════════════════════════
# Basic shapes
# ═══════════════════════════════════════════════════════════════════════════

class TestBasicSettlements:

    def test_everyone_square_no_transfers(self):
        assert compute_settlements(_nets(A="0", B="0", C="0")) == []

    def test_empty_input(self):
        assert compute_settlements({}) == []

    def test_one_debtor_one_creditor(self):
        transfers = compute_settlements(_nets(A="25.00", B="-25.00"))
        assert _as_tuples(transfers) == [("B", "A", "25.00")]

    def test_one_creditor_two_debtors_tie_broken_by_name(self):
        """A +20, B −10, C −10 → B pays first (B < C), then C."""
        transfers = compute_settlements(_nets(A="20.00", C="-10.00", B="-10.00"))
        assert _as_tuples(transfers) == [
            ("B", "A", "10.00"),
            ("C", "A", "10.00"),
        ]

    def test_largest_debtor_matched_first(self):
        transfers = compute_settlements(_nets(A="50.00", B="-10.00", C="-40.00"))
        assert _as_tuples(transfers) == [
            ("C", "A", "40.00"),
            ("B", "A", "10.00"),
        ]

    def test_largest_creditor_matched_first(self):
        transfers = compute_settlements(_nets(A="10.00", B="30.00", C="-40.00"))
        assert _as_tuples(transfers) == [
            ("C", "B", "30.00"),
            ("C", "A", "10.00"),
        ]

    def test_zero_balance_participant_never_in_transfers(self):
        transfers = compute_settlements(_nets(A="5.00", Z="0.00", B="-5.00"))
        names = {t.from_participant for t in transfers} | {t.to_participant for t in transfers}
        assert "Z" not in names

    def test_accepts_balance_objects(self):
        balances = {
            "A": Balance("A", Money(3000), Money(1000)),
            "B": Balance("B", Money(0), Money(1000)),
            "C": Balance("C", Money(0), Money(1000)),
        }
        transfers = compute_settlements(balances)
        assert _as_tuples(transfers) == [("B", "A", "10.00"), ("C", "A", "10.00")]


# ═══════════════════════════════════════════════════════════════════════════
# Invariants
# ═══════════════════════════════════════════════════════════════════════════

class TestSettlementInvariants:

    @pytest.mark.parametrize("nets", [
        _nets(A="100.00", B="-33.33", C="-33.33", D="-33.34"),
        _nets(A="0.01", B="-0.01"),
        _nets(A="70.00", B="30.00", C="-45.00", D="-25.00", E="-30.00"),
        _nets(A="12.34", B="-5.67", C="-6.67", D="0.00", E="10.00", F="-10.00"),
    ])
    def test_transfers_zero_every_balance(self, nets):
        transfers = compute_settlements(nets)
        after = _apply(nets, transfers)
        assert all(v == Money.zero() for v in after.values())

    @pytest.mark.parametrize("nets", [
        _nets(A="100.00", B="-33.33", C="-33.33", D="-33.34"),
        _nets(A="70.00", B="30.00", C="-45.00", D="-25.00", E="-30.00"),
    ])
    def test_at_most_n_minus_one_transfers(self, nets):
        assert len(compute_settlements(nets)) <= len(nets) - 1

    def test_every_transfer_positive(self):
        transfers = compute_settlements(_nets(A="9.99", B="-3.33", C="-6.66"))
        assert all(t.amount.is_positive for t in transfers)

    def test_input_order_does_not_change_output(self):
        forward = compute_settlements(_nets(A="20.00", B="-10.00", C="-10.00"))
        reverse = compute_settlements(_nets(C="-10.00", B="-10.00", A="20.00"))
        assert forward == reverse


# ═══════════════════════════════════════════════════════════════════════════
# Corrupt input
# ═══════════════════════════════════════════════════════════════════════════

class TestUnbalancedInput:

    def test_one_cent_residual_is_tolerated(self):
        transfers = compute_settlements(_nets(A="10.00", B="-9.99"))
        assert _as_tuples(transfers) == [("B", "A", "9.99")]

    def test_one_cent_residuals_across_creditors_are_tolerated(self):
        transfers = compute_settlements(_nets(A="5.00", B="5.00", C="-9.99"))
        assert _as_tuples(transfers) == [("C", "A", "5.00"), ("C", "B", "4.99")]

    def test_two_cent_residual_raises_unbalanced(self):
        with pytest.raises(AppError) as exc:
            compute_settlements(_nets(A="10.00", B="-9.98"))
        assert exc.value.code == ErrorCode.UNBALANCED
        assert exc.value.http_status == 500

    def test_only_debtors_raises_unbalanced(self):
        with pytest.raises(AppError) as exc:
            compute_settlements(_nets(A="-1.00", B="-2.00"))
        assert exc.value.code == ErrorCode.UNBALANCED
