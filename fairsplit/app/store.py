"""
store.py — In-memory group table and per-group append-only ledgers.

This is the only shared mutable state in the application. Services receive a
LedgerStore as an explicit argument; nothing in here knows about Flask or HTTP.

Concurrency discipline:
  - LedgerStore._lock guards the group table (dict reads and writes only).
    It is never held while a ledger lock is held, and vice versa.
  - Each Ledger has its own lock. Writers hold it for validation + append
    (see Ledger.write_lock and expense_service.add_expense). Appends replace
    an immutable tuple, so readers call snapshot() without locking and always
    see a fully committed prefix of the ledger.
  - Deleting a group removes it from the table first, then closes its ledger
    under the ledger lock. A writer that already fetched the ledger sees
    `closed` once it acquires the lock and must report GROUP_NOT_FOUND.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Iterator

from fairsplit.app.models.expense import Expense
from fairsplit.app.models.group import Group


def new_id() -> str:
    """Opaque identifier for groups and expenses."""
    return str(uuid.uuid4())


class Ledger:
    """Append-only, ordered record of one group's expenses."""

    def __init__(self, group: Group) -> None:
        self.group = group
        self._entries: tuple[Expense, ...] = ()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def write_lock(self) -> Iterator[Ledger]:
        """Serialises writers on this ledger. Hold it for validation + append only."""
        with self._lock:
            yield self

    def append(self, expense: Expense) -> str:
        """
        Admits an already-validated expense. Caller MUST hold write_lock().
        Returns the expense id.
        """
        if expense.group_id != self.group.group_id:
            raise ValueError(
                f"Expense {expense.expense_id} belongs to group {expense.group_id}, "
                f"not {self.group.group_id}."
            )
        if self._closed:
            raise RuntimeError(f"Ledger for group {self.group.group_id} is closed.")
        self._entries = self._entries + (expense,)
        return expense.expense_id

    def snapshot(self) -> tuple[Expense, ...]:
        """Immutable view of all committed expenses, in insertion order."""
        return self._entries

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._entries = ()

    def __len__(self) -> int:
        return len(self._entries)


class LedgerStore:
    """Group table: group_id -> Ledger (which carries its Group)."""

    def __init__(self) -> None:
        self._ledgers: dict[str, Ledger] = {}
        self._lock = threading.Lock()

    def add(self, group: Group, *, admit=None) -> Ledger:
        """
        Registers a new group with an empty ledger.

        `admit` is an optional callable run with the current groups while the
        table lock is held; it may raise to refuse the insert (used for
        group-name uniqueness and the group limit, which must be checked
        atomically with the insert).
        """
        ledger = Ledger(group)
        with self._lock:
            if admit is not None:
                admit([l.group for l in self._ledgers.values()])
            if group.group_id in self._ledgers:
                raise ValueError(f"Group id {group.group_id} is already registered.")
            self._ledgers[group.group_id] = ledger
        return ledger

    def get(self, group_id: str) -> Ledger | None:
        with self._lock:
            return self._ledgers.get(group_id)

    def remove(self, group_id: str) -> Ledger | None:
        with self._lock:
            ledger = self._ledgers.pop(group_id, None)
        if ledger is not None:
            ledger.close()
        return ledger

    def ledgers(self) -> list[Ledger]:
        """All live ledgers in group creation order."""
        with self._lock:
            return list(self._ledgers.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._ledgers)
