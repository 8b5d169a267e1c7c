"""
services/group_service.py — Group registry business logic.

Rules enforced here (all before any mutation):
  INVALID_GROUP_NAME (422)      — name must be non-empty after trim
  EMPTY_PARTICIPANT_LIST (422)  — at least one participant
  TOO_MANY_PARTICIPANTS (422)   — at most `max_participants` (default 10)
  INVALID_FIELD (400)           — a participant name is blank
  DUPLICATE_PARTICIPANT (422)   — names are unique, case-sensitive
  DUPLICATE_GROUP_NAME (409)    — group names are unique, case-insensitive
  GROUP_LIMIT_REACHED (409)     — at most `max_groups` groups when configured
  GROUP_NOT_FOUND (404)         — get/delete of an unknown id

The participant set is fixed at creation. There is no add/remove member
operation: a group with different people is a different group.

Layer rules:
  - No Flask imports. Pure Python with a LedgerStore parameter.
  - Limits come in as arguments; the route reads them from app config.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from fairsplit.app.errors import AppError, ErrorCode, group_not_found
from fairsplit.app.models.group import Group
from fairsplit.app.services.expense_service import total_expense
from fairsplit.app.store import Ledger, LedgerStore, new_id

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTICIPANTS = 10


# ── Private helpers ────────────────────────────────────────────────────────

def _get_ledger_or_404(group_id: str, store: LedgerStore) -> Ledger:
    """Returns the group's Ledger or raises GROUP_NOT_FOUND (404)."""
    ledger = store.get(group_id)
    if ledger is None:
        raise group_not_found(group_id)
    return ledger


def _validate_group_name(group_name: str) -> str:
    cleaned = (group_name or "").strip()
    if not cleaned:
        raise AppError(
            ErrorCode.INVALID_GROUP_NAME,
            "Group name must not be blank.",
            422,
            field="groupName",
        )
    return cleaned


def _validate_participants(
        participants: Sequence[str],
        max_participants: int,
) -> tuple[str, ...]:
    """Returns the trimmed participant names in declared order."""
    if not participants:
        raise AppError(
            ErrorCode.EMPTY_PARTICIPANT_LIST,
            "A group needs at least one participant.",
            422,
            field="participants",
        )

    if len(participants) > max_participants:
        raise AppError(
            ErrorCode.TOO_MANY_PARTICIPANTS,
            f"Maximum {max_participants} participants allowed per group "
            f"(got {len(participants)}).",
            422,
            field="participants",
        )

    cleaned = tuple((name or "").strip() for name in participants)
    if any(not name for name in cleaned):
        raise AppError(
            ErrorCode.INVALID_FIELD,
            "Participant names must not be blank.",
            400,
            field="participants",
        )

    seen: set[str] = set()
    for name in cleaned:
        if name in seen:
            raise AppError(
                ErrorCode.DUPLICATE_PARTICIPANT,
                f"Participant {name!r} appears more than once.",
                422,
                field="participants",
            )
        seen.add(name)

    return cleaned


def _admission_check(group_name: str, max_groups: int | None):
    """
    Builds the check LedgerStore.add() runs under its table lock, so that name
    uniqueness and the group limit cannot be raced past by concurrent creates.
    """
    folded = group_name.casefold()

    def admit(existing: list[Group]) -> None:
        if max_groups and len(existing) >= max_groups:
            raise AppError(
                ErrorCode.GROUP_LIMIT_REACHED,
                f"Maximum group limit of {max_groups} reached.",
                409,
            )
        if any(g.group_name.casefold() == folded for g in existing):
            raise AppError(
                ErrorCode.DUPLICATE_GROUP_NAME,
                f"Group name already exists: {group_name}.",
                409,
                field="groupName",
            )

    return admit


def _build_group_dict(ledger: Ledger) -> dict:
    """Serialises a Group with its running expense total to a plain dict."""
    group = ledger.group
    return {
        "groupId": group.group_id,
        "groupName": group.group_name,
        "participants": list(group.participants),
        "participantCount": group.participant_count,
        "totalExpense": total_expense(ledger).to_decimal(),
        "createdAt": group.created_at.isoformat(),
    }


# ── Public service functions ───────────────────────────────────────────────

def create_group(
        group_name: str,
        participants: Sequence[str],
        store: LedgerStore,
        max_participants: int = DEFAULT_MAX_PARTICIPANTS,
        max_groups: int | None = None,
) -> Group:
    """
    Registers a new group with an empty ledger.

    Args:
        group_name:       Display name; trimmed before storing.
        participants:     1..max_participants unique names, in declared order.
        max_participants: Upper bound on participants (config MAX_PARTICIPANTS).
        max_groups:       Upper bound on live groups; None or 0 means unlimited.

    Returns: the new Group.
    """
    name = _validate_group_name(group_name)
    names = _validate_participants(participants, max_participants)

    group = Group(
        group_id=new_id(),
        group_name=name,
        participants=names,
        created_at=datetime.now(timezone.utc),
    )
    store.add(group, admit=_admission_check(name, max_groups))

    logger.info(
        "Group %s created: %r with %d participants",
        group.group_id, group.group_name, group.participant_count,
    )
    return group


def get_group(group_id: str, store: LedgerStore) -> Group:
    """Returns the Group or raises GROUP_NOT_FOUND (404)."""
    return _get_ledger_or_404(group_id, store).group


def get_group_summary(group_id: str, store: LedgerStore) -> dict:
    """Group details plus participantCount and totalExpense, as served by the API."""
    return _build_group_dict(_get_ledger_or_404(group_id, store))


def list_groups(store: LedgerStore) -> list[dict]:
    """Summaries of all groups, in creation order."""
    return [_build_group_dict(ledger) for ledger in store.ledgers()]


def delete_group(group_id: str, store: LedgerStore) -> None:
    """
    Discards a group and its entire ledger. Irreversible.

    Raises:
      AppError(GROUP_NOT_FOUND, 404) — group does not exist (or was already deleted).
    """
    ledger = store.remove(group_id)
    if ledger is None:
        raise group_not_found(group_id)

    logger.info("Group %s deleted: %r", group_id, ledger.group.group_name)
