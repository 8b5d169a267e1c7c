"""
extensions.py — Per-application LedgerStore registration.

Pattern:
    1. create_app() builds a fresh LedgerStore and calls init_store(app, store).
    2. Routes call get_store() to fetch the store of the app handling the request.
    3. Services never import this module; they receive the store as an argument.

There is no module-level store object. Every app instance (and
therefore every test app) owns an isolated group table.

    from fairsplit.app.extensions import get_store
"""

from __future__ import annotations

from flask import Flask, current_app

from fairsplit.app.store import LedgerStore

STORE_KEY = "fairsplit.ledger_store"


def init_store(app: Flask, store: LedgerStore | None = None) -> LedgerStore:
    """Attaches `store` (or a new empty one) to the app and returns it."""
    if store is None:
        store = LedgerStore()
    app.extensions[STORE_KEY] = store
    return store


def get_store() -> LedgerStore:
    """Returns the LedgerStore of the current application. Needs an app context."""
    return current_app.extensions[STORE_KEY]
