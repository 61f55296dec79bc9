"""Service-level tracking for application reviews."""

import math
from datetime import datetime, timedelta

# Review must complete within this many days of submission
SLA_DAYS = 14


def expected_completion(submission_date: datetime) -> datetime:
    return submission_date + timedelta(days=SLA_DAYS)


def days_to_complete(submission_date: datetime, completion_date: datetime) -> int:
    """Whole days between submission and completion, rounded up."""
    elapsed = (completion_date - submission_date).total_seconds()
    return math.ceil(elapsed / 86400)


def is_overdue(days: int) -> bool:
    return days > SLA_DAYS
