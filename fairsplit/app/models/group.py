"""
models/group.py — Group value object.

No business logic. No imports from services or routes.
Validation (name, participant count, duplicates) lives in
services/group_service.py; by the time a Group is built it is already valid.

Participants are stored as a tuple: declared order is significant (equal
split remainders go to the first participants) and the set is immutable
after creation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Group:
    group_id: str
    group_name: str
    participants: tuple[str, ...]
    created_at: datetime = field(compare=False)

    def __post_init__(self) -> None:
        # Accept any sequence from callers but always store a tuple.
        object.__setattr__(self, "participants", tuple(self.participants))

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Group id={self.group_id} name={self.group_name!r}>"
