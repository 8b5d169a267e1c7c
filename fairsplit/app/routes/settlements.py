"""
routes/settlements.py — Settlement route handler.

Layer rules:
  - Call ONE service, return the response body.
  - Settlements are derived, never stored: every GET recomputes balances and
    transfers from the current ledger snapshot, so repeated calls on an
    unchanged ledger return identical bodies.

Endpoints (base url_prefix=<API_PREFIX>/groups):
  GET /groups/:id/settlements → 200  transfers + per-member balances
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from fairsplit.app.extensions import get_store
from fairsplit.app.services import balance_service

settlements_bp = Blueprint("settlements", __name__)


@settlements_bp.route("/<group_id>/settlements", methods=["GET"])
def get_settlements(group_id: str):
    """
    GET /groups/:id/settlements

    UNBALANCED (500) is raised inside balance_service if the ledger's
    balances do not sum to zero; the error handler logs it.
    """
    result = balance_service.get_settlement_response(group_id, get_store())
    return jsonify(result), 200
