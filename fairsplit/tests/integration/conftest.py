"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against a real Flask app built by create_app("testing").
  - State lives in the app's LedgerStore (in memory), so isolation is simply
    a fresh app per test: every test starts with zero groups.
  - TestingConfig disables sample-data seeding and pins the limits
    (MAX_PARTICIPANTS=10, MAX_GROUPS=10, API_PREFIX=/api).

Helper functions (not fixtures) are provided for common operations:
  - make_group(client, ...)     → group dict (asserts 201)
  - make_expense(client, ...)   → HTTP response
  - get_settlements(client, id) → HTTP response
  - error_code(resp)            → the "code" of an error envelope

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.

Tests must cover happy paths AND failure paths.
"""

from __future__ import annotations

import pytest

from fairsplit.app import create_app

API = "/api"
PAST_DATE = "2024-01-15"


# ═══════════════════════════════════════════════════════════════════════════
# App and client fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app():
    """A fresh Flask application (and therefore a fresh, empty store) per test."""
    return create_app("testing")


@pytest.fixture
def client(app):
    """Flask test client bound to this test's app."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def make_group(
    client,
    name: str = "Test Group",
    participants: list[str] | None = None,
) -> dict:
    """
    Creates a group and returns the response body.
    Default participants: Alice, Bob, Charlie.
    """
    if participants is None:
        participants = ["Alice", "Bob", "Charlie"]
    resp = client.post(
        f"{API}/groups",
        json={"groupName": name, "participants": participants},
    )
    assert resp.status_code == 201, f"make_group failed: {resp.get_json()}"
    return resp.get_json()


def make_expense(
    client,
    group_id: str,
    amount,
    paid_by: str,
    description: str = "Test expense",
    date: str | None = PAST_DATE,
    contributions: dict | None = None,
):
    """
    POSTs an expense and returns the HTTP response (status not asserted).
    `amount` is sent as given, so tests can pass numbers or strings.
    """
    body = {"description": description, "amount": amount, "paidBy": paid_by}
    if date is not None:
        body["date"] = date
    if contributions is not None:
        body["contributions"] = contributions
    return client.post(f"{API}/groups/{group_id}/expenses", json=body)


def get_settlements(client, group_id: str):
    return client.get(f"{API}/groups/{group_id}/settlements")


def error_code(resp) -> str:
    """Returns error.code from the standard error envelope."""
    body = resp.get_json()
    assert "error" in body, f"expected an error envelope, got {body}"
    return body["error"]["code"]
