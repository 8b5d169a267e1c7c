"""
errors.py — AppError base class and error code registry.

Every error returned by the FairSplit API must use a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - New error codes require: add constant here + register the HTTP status
    in the comment block + add a test that raises it.
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - UNBALANCED is an internal invariant breach, never a user error. It is
    logged and surfaced as a 500; it must not be caught and "fixed up".
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the section header.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_AMOUNT_PRECISION   = "INVALID_AMOUNT_PRECISION"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    GROUP_NOT_FOUND            = "GROUP_NOT_FOUND"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    DUPLICATE_GROUP_NAME       = "DUPLICATE_GROUP_NAME"
    GROUP_LIMIT_REACHED        = "GROUP_LIMIT_REACHED"

    # ── Business Rule Violations (422) ────────────────────────────────────
    # Split calculator
    INVALID_AMOUNT             = "INVALID_AMOUNT"
    UNKNOWN_PARTICIPANT        = "UNKNOWN_PARTICIPANT"
    CONTRIBUTIONS_MISMATCH     = "CONTRIBUTIONS_MISMATCH"
    # Ledger admission
    INVALID_DESCRIPTION        = "INVALID_DESCRIPTION"
    FUTURE_DATE                = "FUTURE_DATE"
    # Group registry
    EMPTY_PARTICIPANT_LIST     = "EMPTY_PARTICIPANT_LIST"
    TOO_MANY_PARTICIPANTS      = "TOO_MANY_PARTICIPANTS"
    DUPLICATE_PARTICIPANT      = "DUPLICATE_PARTICIPANT"
    INVALID_GROUP_NAME         = "INVALID_GROUP_NAME"

    # ── System Errors (500) ────────────────────────────────────────────────
    UNBALANCED                 = "UNBALANCED"    # ledger produced non-zero residual
    INTERNAL_ERROR             = "INTERNAL_ERROR"


def group_not_found(group_id: str) -> AppError:
    """Builds the GROUP_NOT_FOUND (404) error shared by every service."""
    return AppError(
        ErrorCode.GROUP_NOT_FOUND,
        f"Group {group_id} does not exist.",
        404,
    )
