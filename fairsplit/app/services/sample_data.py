"""
services/sample_data.py — Demo groups for local development.

Loaded by create_app() when SEED_SAMPLE_DATA is enabled. Everything goes
through the public service functions, so seeded data obeys exactly the same
validation as data entered through the API.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from fairsplit.app.services import expense_service, group_service
from fairsplit.app.store import LedgerStore

logger = logging.getLogger(__name__)

# (group name, participants, [(description, amount, paid by, days ago)])
SAMPLE_GROUPS = [
    (
        "Weekend Trip",
        ["Alice", "Bob", "Charlie"],
        [
            ("Hotel Booking", "300.00", "Alice", 5),
            ("Dinner", "90.00", "Bob", 4),
            ("Gas", "45.00", "Charlie", 3),
            ("Breakfast", "36.00", "Alice", 2),
        ],
    ),
    (
        "Office Lunch",
        ["David", "Emma", "Frank", "Grace"],
        [
            ("Pizza Lunch", "80.00", "David", 7),
            ("Coffee", "24.00", "Emma", 6),
            ("Team Dinner", "160.00", "Frank", 3),
        ],
    ),
    (
        "Apartment Expenses",
        ["Henry", "Iris"],
        [
            ("Rent", "2000.00", "Henry", 10),
            ("Utilities", "150.00", "Iris", 8),
            ("Groceries", "120.00", "Henry", 2),
        ],
    ),
]


def seed_sample_data(store: LedgerStore, today: date | None = None) -> int:
    """
    Creates the sample groups with equal-split expenses dated relative to today.
    Returns the number of expenses recorded.
    """
    today = today or date.today()
    logger.info("Initializing sample data...")

    expense_count = 0
    for name, participants, expenses in SAMPLE_GROUPS:
        group = group_service.create_group(name, participants, store)
        for description, amount, paid_by, days_ago in expenses:
            expense_service.add_expense(
                group.group_id,
                {
                    "description": description,
                    "amount": Decimal(amount),
                    "paid_by": paid_by,
                    "date": today - timedelta(days=days_ago),
                },
                store,
                today=today,
            )
            expense_count += 1

    logger.info(
        "Sample data initialization complete: %d groups, %d expenses",
        len(SAMPLE_GROUPS), expense_count,
    )
    return expense_count
