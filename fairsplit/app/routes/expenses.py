"""
routes/expenses.py — Expense route handlers.

Layer rules:
  - Parse, validate, call ONE service, return the response body.
  - No business logic.
  - _serialize_expense() is a pure data-shape helper — not business logic.

There is no PATCH or DELETE for expenses: the ledger is append-only.
Mistakes are corrected with a compensating expense.

Endpoints (base url_prefix=<API_PREFIX>/groups):
  POST /groups/:id/expenses   → 201  append an expense
  GET  /groups/:id/expenses   → 200  list expenses in insertion order
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from fairsplit.app.extensions import get_store
from fairsplit.app.models.expense import Expense
from fairsplit.app.schemas.expense_schema import CreateExpenseSchema
from fairsplit.app.services import expense_service

expenses_bp = Blueprint("expenses", __name__)


# ── Serialization helper ───────────────────────────────────────────────────
# Pure data-shaping. Money → 2-place Decimal; the JSON provider emits numbers.

def _serialize_expense(expense: Expense) -> dict:
    """Converts an Expense to a plain dict for JSON output."""
    return {
        "expenseId": expense.expense_id,
        "groupId": expense.group_id,
        "description": expense.description,
        "amount": expense.amount.to_decimal(),
        "paidBy": expense.paid_by,
        "date": expense.date.isoformat(),
        "splitType": expense.split_type.value,
        "shares": {
            name: share.to_decimal()
            for name, share in expense.shares.items()
        },
        "createdAt": expense.created_at.isoformat(),
    }


@expenses_bp.route("/<group_id>/expenses", methods=["POST"])
def create_expense(group_id: str):
    """
    POST /groups/:id/expenses — Record a new expense.
    Equal split unless a contributions object is supplied.
    """
    data = CreateExpenseSchema().load(request.get_json(force=True) or {})
    expense = expense_service.add_expense(
        group_id=group_id,
        data=data,
        store=get_store(),
    )
    return jsonify(_serialize_expense(expense)), 201


@expenses_bp.route("/<group_id>/expenses", methods=["GET"])
def list_expenses(group_id: str):
    """GET /groups/:id/expenses — All expenses of the group, oldest entry first."""
    expenses = expense_service.list_expenses(group_id=group_id, store=get_store())
    return jsonify([_serialize_expense(e) for e in expenses]), 200
