"""Tests for SLA calculations."""

from datetime import datetime, timedelta

from onboarding.core.workflow import sla


SUBMITTED = datetime(2026, 3, 2, 9, 30)


class TestSla:

    def test_expected_completion_is_fourteen_days(self):
        assert sla.SLA_DAYS == 14
        assert sla.expected_completion(SUBMITTED) == datetime(2026, 3, 16, 9, 30)

    def test_days_round_up(self):
        assert sla.days_to_complete(SUBMITTED, SUBMITTED + timedelta(hours=1)) == 1
        assert sla.days_to_complete(SUBMITTED, SUBMITTED + timedelta(days=1)) == 1
        assert sla.days_to_complete(SUBMITTED, SUBMITTED + timedelta(days=1, seconds=1)) == 2

    def test_same_instant_is_zero_days(self):
        assert sla.days_to_complete(SUBMITTED, SUBMITTED) == 0

    def test_overdue_only_after_fourteen_days(self):
        assert not sla.is_overdue(14)
        assert sla.is_overdue(15)

    def test_fourteen_days_and_an_hour_is_overdue(self):
        days = sla.days_to_complete(SUBMITTED, SUBMITTED + timedelta(days=14, hours=1))
        assert days == 15
        assert sla.is_overdue(days)
