"""
routes/groups.py — Group registry route handlers.

Layer rules:
  - Parse, validate, call ONE service, return the response body.
  - No business logic. No direct store access beyond get_store().

Endpoints (base url_prefix=<API_PREFIX>/groups):
  POST   /groups        → 201  create group
  GET    /groups        → 200  list group summaries
  GET    /groups/:id    → 200  get group summary
  DELETE /groups/:id    → 200  delete group and its ledger
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from fairsplit.app.extensions import get_store
from fairsplit.app.schemas.group_schema import CreateGroupSchema
from fairsplit.app.services import group_service

groups_bp = Blueprint("groups", __name__)


@groups_bp.route("", methods=["POST"])
def create_group():
    """POST /groups — Create a group with a fixed participant list."""
    data = CreateGroupSchema().load(request.get_json(force=True) or {})
    store = get_store()
    group = group_service.create_group(
        group_name=data["group_name"],
        participants=data["participants"],
        store=store,
        max_participants=current_app.config["MAX_PARTICIPANTS"],
        max_groups=current_app.config["MAX_GROUPS"],
    )
    result = group_service.get_group_summary(group.group_id, store)
    return jsonify(result), 201


@groups_bp.route("", methods=["GET"])
def list_groups():
    """GET /groups — All groups with participant count and expense total."""
    return jsonify(group_service.list_groups(get_store())), 200


@groups_bp.route("/<group_id>", methods=["GET"])
def get_group(group_id: str):
    """GET /groups/:id — One group summary, or GROUP_NOT_FOUND (404)."""
    return jsonify(group_service.get_group_summary(group_id, get_store())), 200


@groups_bp.route("/<group_id>", methods=["DELETE"])
def delete_group(group_id: str):
    """DELETE /groups/:id — Irreversibly discards the group and its ledger."""
    group_service.delete_group(group_id, get_store())
    return jsonify({"deleted": True, "groupId": group_id}), 200
