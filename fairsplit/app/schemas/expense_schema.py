"""
schemas/expense_schema.py — Marshmallow schema for expense endpoints.

Validation responsibility:
  - This file:
      - Field types, required keys, ISO date format
      - INVALID_AMOUNT_PRECISION (400) — amount with more than 2 decimal places
      - contributions is an object of {name: number}
  - services/expense_service.py and services/split_service.py:
      - INVALID_AMOUNT (422)          — amount <= 0, negative contribution
      - INVALID_DESCRIPTION (422)     — blank after trim
      - FUTURE_DATE (422)             — date after today
      - UNKNOWN_PARTICIPANT (422)     — requires the group's participant list
      - CONTRIBUTIONS_MISMATCH (422)  — requires Decimal arithmetic on the amount

Custom contributions are NOT precision-checked: values such as 3.333 are
accepted and rounded to cents by the split calculator, provided their sum is
within a cent of the amount.

IMPORTANT: Inherits from marshmallow.Schema directly so schemas can be
           instantiated in unit tests without a Flask application context.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import Schema, ValidationError, fields, validate

from fairsplit.app.errors import ErrorCode


# ── Shared monetary amount validator ──────────────────────────────────────
#
# Input with more than 2 decimal places is REJECTED with
# INVALID_AMOUNT_PRECISION, never rounded or truncated.
# The sign check belongs to the service (INVALID_AMOUNT, 422).
# ──────────────────────────────────────────────────────────────────────────

def _validate_amount_precision(value: Decimal) -> None:
    """
    Decimal.as_tuple().exponent gives the scale as a negative integer:
      Decimal("10.123").as_tuple().exponent == -3  → 3 dp → REJECT
      Decimal("10.12").as_tuple().exponent  == -2  → 2 dp → accept
      Decimal("10.120").normalize()          → 10.12 → accept
    """
    if value.normalize().as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


class CreateExpenseSchema(Schema):
    """
    POST /groups/:id/expenses

    Split behaviour:
      - contributions absent, null or {} → equal split across all participants.
      - contributions present            → custom split; every participant
                                           must appear (checked in service).
    """

    description = fields.Str(
        required=True,
        validate=validate.Length(
            max=255,
            error="Description must be at most 255 characters.",
        ),
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_amount_precision,
    )

    paid_by = fields.Str(required=True, data_key="paidBy")

    # ISO "YYYY-MM-DD". Missing or null means today (service default).
    date = fields.Date(load_default=None, allow_none=True)

    contributions = fields.Dict(
        keys=fields.Str(),
        values=fields.Decimal(),
        load_default=None,
        allow_none=True,
    )
