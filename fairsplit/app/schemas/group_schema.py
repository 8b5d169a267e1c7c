"""
schemas/group_schema.py — Marshmallow schema for group endpoints.

Validation responsibility:
  - This file: request shape only — required keys, types, string lengths.
  - services/group_service.py:
      - INVALID_GROUP_NAME     (blank after trim)
      - EMPTY_PARTICIPANT_LIST / TOO_MANY_PARTICIPANTS / DUPLICATE_PARTICIPANT
      - DUPLICATE_GROUP_NAME / GROUP_LIMIT_REACHED (require the group table)

The business rules stay in the service so that the error codes clients see
are the same whether the service is called over HTTP or directly.

IMPORTANT: Inherits from marshmallow.Schema directly so schemas can be
           instantiated in unit tests without a Flask application context.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class CreateGroupSchema(Schema):
    """
    POST /groups

    Wire names are camelCase (groupName); loaded keys are snake_case.
    """

    group_name = fields.Str(
        required=True,
        data_key="groupName",
        validate=validate.Length(
            max=100,
            error="Group name must be at most 100 characters.",
        ),
    )

    # Emptiness and count are service rules; only the element type is checked here.
    participants = fields.List(
        fields.Str(
            validate=validate.Length(
                max=50,
                error="Participant names must be at most 50 characters.",
            ),
        ),
        required=True,
    )
