from datetime import date, timedelta

import pytest

from conftest import TODAY, FakeApi
from models.bucket import LifeXpBucket
from models.frequency import Frequency
from models.obligation import DueStatus
from services.lifexp_service import LifeXpService
from utils.errors import BackendError, InvalidFrequencyError


def _bucket(id=1, name="Japan trip", next_date=None, frequency="monthly", status="active", **kw):
    return LifeXpBucket(
        id=id, name=name, target_amount=kw.pop("target", 120000), saved_amount=kw.pop("saved", 0),
        is_repetitive=frequency is not None, contribution_frequency=frequency,
        next_contribution_date=next_date, status=status, **kw,
    )


@pytest.fixture
def api():
    return FakeApi(buckets=[_bucket(next_date=date(2026, 10, 20))])


@pytest.fixture
def service(api, lifexp_log):
    return LifeXpService(api, lifexp_log)


def test_status_uses_seven_day_threshold(service):
    assert service.status_for(_bucket(next_date=TODAY + timedelta(days=7)), TODAY) == DueStatus.due_soon(7)
    assert service.status_for(_bucket(next_date=TODAY + timedelta(days=8)), TODAY) == DueStatus.none()
    assert service.status_for(_bucket(next_date=TODAY, frequency=None), TODAY) == DueStatus.none()


def test_invalid_frequency_means_no_status(service):
    bucket = _bucket(next_date=TODAY, frequency="half_yearly")
    assert bucket.obligation is None
    assert service.status_for(bucket, TODAY) == DueStatus.none()


def test_due_buckets_only_active_and_most_urgent_first(service):
    buckets = [
        _bucket(1, "soon", TODAY + timedelta(days=5)),
        _bucket(2, "late", TODAY - timedelta(days=2)),
        _bucket(3, "later", TODAY - timedelta(days=9)),
        _bucket(4, "done", TODAY - timedelta(days=30), status="achieved"),
        _bucket(5, "far", TODAY + timedelta(days=40)),
    ]
    due = service.due_buckets(buckets, TODAY)
    assert [b.name for b, _ in due] == ["later", "late", "soon"]


def test_contribute_logs_after_success(service, api, lifexp_log):
    bucket = api.buckets[1]
    updated, history = service.contribute(bucket, 2500, "bonus", today=TODAY)
    assert updated.saved_amount == 2500
    entry = lifexp_log.entries()[0]
    assert entry.action == "contribution_added"
    assert entry.amount == 2500
    assert entry.details == "New total: ₹2,500"
    assert entry.subject_id == 1


def test_contribute_rejects_non_positive(service):
    with pytest.raises(ValueError):
        service.contribute(_bucket(), 0)


def test_failed_mutation_logs_nothing(service, api, lifexp_log):
    api.failing.add("add_contribution")
    with pytest.raises(BackendError):
        service.contribute(api.buckets[1], 100)
    assert lifexp_log.entries() == []


def test_mark_done_advances_anchor_and_defaults_amount(service, api, lifexp_log):
    updated, history = service.mark_done(api.buckets[1], today=TODAY)
    assert history.amount == 10000
    assert updated.next_contribution_date == date(2026, 11, 20)
    assert ("mark_contribution_done", 1, 10000, date(2026, 11, 20), None) in api.calls
    assert lifexp_log.entries()[0].action == "contribution_marked_done"


def test_mark_done_without_anchor_starts_from_today(service, api):
    api.buckets[1].next_contribution_date = None
    updated, _ = service.mark_done(api.buckets[1], amount=500, today=TODAY)
    assert updated.next_contribution_date == date(2026, 11, 18)


def test_create_bucket_payload_and_log(service, api, lifexp_log):
    created = service.create_bucket(
        "Emergency fund", 300000, Frequency.custom(14), date(2026, 11, 1), today=TODAY
    )
    payload = api.calls[-1][1]
    assert payload["is_repetitive"] is True
    assert payload["contribution_frequency"] == "custom"
    assert payload["custom_frequency_days"] == 14
    assert payload["next_contribution_date"] == "2026-11-01"
    assert created.frequency == Frequency.custom(14)

    entry = lifexp_log.entries()[0]
    assert entry.action == "bucket_created"
    assert entry.details == "Target: ₹3,00,000, Frequency: Every 14 days"


def test_create_bucket_rejects_half_yearly(service, api, lifexp_log):
    with pytest.raises(InvalidFrequencyError):
        service.create_bucket("Car", 100, Frequency.half_yearly())
    assert api.calls == []
    assert lifexp_log.entries() == []


def test_update_bucket_lists_changes(service, api, lifexp_log):
    bucket = api.buckets[1]
    service.update_bucket(bucket, "Japan 2027", 150000, Frequency.quarterly(), date(2026, 12, 1), today=TODAY)
    assert lifexp_log.entries()[0].details == "Name: Japan 2027, Target: ₹1,50,000, Frequency: Quarterly"


def test_update_bucket_without_changes(service, api, lifexp_log):
    bucket = api.buckets[1]
    service.update_bucket(
        bucket, bucket.name, bucket.target_amount, Frequency.monthly(), bucket.next_contribution_date
    )
    assert lifexp_log.entries()[0].details == "Settings updated"


def test_delete_achieve_reactivate(service, api, lifexp_log):
    bucket = api.buckets[1]
    service.mark_achieved(bucket, today=TODAY)
    service.reactivate(bucket, today=TODAY)
    service.delete_bucket(bucket, today=TODAY)
    assert [e.action for e in lifexp_log.entries()] == [
        "bucket_deleted", "bucket_reactivated", "bucket_achieved",
    ]
    assert 1 not in api.buckets


def test_history_edits_are_logged(service, api, lifexp_log):
    bucket = api.buckets[1]
    _, history = service.contribute(bucket, 1000, today=TODAY)

    service.update_history(bucket, history, 1200, entry_date=date(2026, 10, 1), today=TODAY)
    assert lifexp_log.entries()[0].details == "Date: 2026-10-01, Amount: ₹1,200"

    edited = api.bucket_history[0]
    service.delete_history(bucket, edited, today=TODAY)
    assert lifexp_log.entries()[0].action == "history_deleted"
    assert lifexp_log.entries()[0].details == "Deleted entry: 2026-10-01"
    assert service.history(bucket) == []
