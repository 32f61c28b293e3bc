"""
Naive-UTC clock helpers.

All persisted timestamps are naive UTC so that SQLite and PostgreSQL compare
them the same way.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
