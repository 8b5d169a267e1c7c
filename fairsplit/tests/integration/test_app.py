"""
tests/integration/test_app.py — Application factory, config and cross-cutting behaviour.

Covers:
  - GET /api/health
  - Unknown routes and wrong methods still answer in the error envelope
  - Unexpected exceptions become INTERNAL_ERROR (500) without leaking details
  - CORS headers in testing mode
  - Sample data seeding is controlled by SEED_SAMPLE_DATA
  - validate_production_config refuses unsafe production settings
  - Each app instance owns an isolated store
"""

from __future__ import annotations

import pytest
from flask import Flask

from fairsplit.app import create_app
from fairsplit.app.extensions import STORE_KEY
from fairsplit.config import TestingConfig, validate_production_config

from .conftest import API, make_group


# ═══════════════════════════════════════════════════════════════════════════
# Health and envelopes
# ═══════════════════════════════════════════════════════════════════════════

class TestCrossCutting:

    def test_health(self, client):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}

    def test_unknown_route_uses_envelope(self, client):
        resp = client.get(f"{API}/nothing-here")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOT_FOUND"

    def test_wrong_method_uses_envelope(self, client):
        resp = client.put(f"{API}/groups")
        assert resp.status_code == 405
        assert resp.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_no_expense_update_or_delete_routes(self, client):
        gid = make_group(client)["groupId"]
        assert client.delete(f"{API}/groups/{gid}/expenses").status_code == 405
        assert client.put(f"{API}/groups/{gid}/expenses").status_code == 405

    def test_unexpected_exception_is_internal_error(self, app, client, monkeypatch):
        from fairsplit.app.services import group_service

        def boom(store):
            raise RuntimeError("secret detail")

        monkeypatch.setattr(group_service, "list_groups", boom)
        app.config["PROPAGATE_EXCEPTIONS"] = False

        resp = client.get(f"{API}/groups")
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "secret detail" not in resp.get_data(as_text=True)

    def test_cors_headers_in_testing(self, client):
        resp = client.get(f"{API}/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


# ═══════════════════════════════════════════════════════════════════════════
# Factory and config
# ═══════════════════════════════════════════════════════════════════════════

class TestFactory:

    def test_testing_config_starts_empty(self, client):
        assert client.get(f"{API}/groups").get_json() == []

    def test_apps_have_isolated_stores(self):
        first, second = create_app("testing"), create_app("testing")
        make_group(first.test_client(), "Only here")

        assert second.test_client().get(f"{API}/groups").get_json() == []
        assert first.extensions[STORE_KEY] is not second.extensions[STORE_KEY]

    def test_seeding_enabled(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, "SEED_SAMPLE_DATA", True)
        app = create_app("testing")

        names = [g["groupName"] for g in app.test_client().get(f"{API}/groups").get_json()]
        assert names == ["Weekend Trip", "Office Lunch", "Apartment Expenses"]


class TestProductionConfig:

    def _app(self, **overrides) -> Flask:
        app = Flask(__name__)
        app.config.update(
            SECRET_KEY="a-real-secret",
            MAX_PARTICIPANTS=10,
            MAX_GROUPS=10,
            CORS_ALLOWED_ORIGINS=["https://fairsplit.example"],
            SEED_SAMPLE_DATA=False,
        )
        app.config.update(overrides)
        return app

    def test_valid_config_passes(self):
        validate_production_config(self._app())

    def test_unlimited_groups_allowed(self):
        validate_production_config(self._app(MAX_GROUPS=0))

    @pytest.mark.parametrize("overrides", [
        {"SECRET_KEY": "change-me-in-production"},
        {"MAX_PARTICIPANTS": 0},
        {"MAX_GROUPS": -1},
        {"CORS_ALLOWED_ORIGINS": ["*"]},
        {"SEED_SAMPLE_DATA": True},
    ])
    def test_unsafe_config_rejected(self, overrides):
        with pytest.raises(ValueError):
            validate_production_config(self._app(**overrides))
