from datetime import date, datetime, timedelta

from models.frequency import Frequency
from models.obligation import DueStatus, RecurringObligation
from services.recurrence_engine import (
    classify,
    classify_obligation,
    days_until,
    is_expired,
    is_expiring_soon,
    next_occurrence,
)

TODAY = date(2026, 10, 18)


def test_next_occurrence_fixed_periods():
    anchor = date(2026, 1, 15)
    assert next_occurrence(anchor, Frequency.monthly()) == date(2026, 2, 15)
    assert next_occurrence(anchor, Frequency.quarterly()) == date(2026, 4, 15)
    assert next_occurrence(anchor, Frequency.half_yearly()) == date(2026, 7, 15)
    assert next_occurrence(anchor, Frequency.yearly()) == date(2027, 1, 15)


def test_next_occurrence_custom_days():
    assert next_occurrence(date(2026, 12, 25), Frequency.custom(10)) == date(2027, 1, 4)


def test_next_occurrence_clamps_to_month_end():
    assert next_occurrence(date(2026, 1, 31), Frequency.monthly()) == date(2026, 2, 28)
    assert next_occurrence(date(2028, 1, 31), Frequency.monthly()) == date(2028, 2, 29)
    assert next_occurrence(date(2026, 11, 30), Frequency.quarterly()) == date(2027, 2, 28)
    assert next_occurrence(date(2028, 2, 29), Frequency.yearly()) == date(2029, 2, 28)


def test_next_occurrence_is_deterministic():
    anchor = date(2026, 3, 31)
    assert next_occurrence(anchor, Frequency.monthly()) == next_occurrence(anchor, Frequency.monthly())


def test_next_occurrence_truncates_datetime():
    assert next_occurrence(datetime(2026, 1, 15, 23, 59), Frequency.monthly()) == date(2026, 2, 15)


def test_days_until():
    assert days_until(None, TODAY) is None
    assert days_until(TODAY, TODAY) == 0
    assert days_until(TODAY + timedelta(days=1), TODAY) == 1
    assert days_until(TODAY - timedelta(days=3), TODAY) == -3


def test_days_until_ignores_time_of_day():
    assert days_until(datetime(2026, 10, 19, 0, 1), datetime(2026, 10, 18, 23, 59)) == 1


def test_classify_due_soon():
    assert classify(TODAY + timedelta(days=5), None, TODAY, 7) == DueStatus.due_soon(5)


def test_classify_due_today_and_threshold_edge():
    assert classify(TODAY, None, TODAY, 7) == DueStatus.due_soon(0)
    assert classify(TODAY + timedelta(days=7), None, TODAY, 7) == DueStatus.due_soon(7)
    assert classify(TODAY + timedelta(days=8), None, TODAY, 7) == DueStatus.none()


def test_classify_overdue_before_expiry():
    status = classify(TODAY - timedelta(days=3), TODAY + timedelta(days=30), TODAY, 15)
    assert status == DueStatus.overdue(3)
    assert status.is_overdue


def test_classify_expired_suppresses_overdue():
    assert classify(TODAY - timedelta(days=3), TODAY - timedelta(days=10), TODAY, 15) == DueStatus.none()


def test_classify_expiry_today_is_not_expired():
    status = classify(TODAY - timedelta(days=1), TODAY, TODAY, 15)
    assert status == DueStatus.overdue(1)


def test_classify_without_anchor():
    assert classify(None, None, TODAY, 7) == DueStatus.none()


def test_classify_obligation():
    obligation = RecurringObligation(Frequency.monthly(), anchor_date=TODAY + timedelta(days=2))
    assert classify_obligation(obligation, TODAY, 7) == DueStatus.due_soon(2)
    assert classify_obligation(None, TODAY, 7) == DueStatus.none()


def test_expiry_helpers():
    assert is_expired(TODAY - timedelta(days=1), TODAY)
    assert not is_expired(TODAY, TODAY)
    assert not is_expired(None, TODAY)
    assert is_expiring_soon(TODAY, TODAY)
    assert is_expiring_soon(TODAY + timedelta(days=60), TODAY)
    assert not is_expiring_soon(TODAY + timedelta(days=61), TODAY)
    assert not is_expiring_soon(TODAY - timedelta(days=1), TODAY)


def test_due_status_describe():
    assert DueStatus.overdue(1).describe() == "overdue by 1 day"
    assert DueStatus.overdue(4).describe() == "overdue by 4 days"
    assert DueStatus.due_soon(0).describe() == "due today"
    assert DueStatus.due_soon(3).describe() == "due in 3d"
    assert DueStatus.none().describe() == ""
