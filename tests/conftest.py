from datetime import date, datetime, timezone

import pytest

from models.account import AccountHistory
from models.bucket import LifeXpBucket, LifeXpHistory
from models.plan import InsurancePlan, PlanHistory
from repositories.storage import InMemoryStorage
from services.activity_log import LIFEXP_DOMAIN, PLANS_DOMAIN, ActivityLog
from utils.errors import BackendError

TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 9, 15, 2, 123000, tzinfo=timezone.utc)


class FakeApi:
    """In-memory stand-in for ApiClient. Methods named in `failing` raise BackendError."""

    def __init__(self, buckets=(), plans=()):
        self.buckets = {b.id: b for b in buckets}
        self.plans = {p.id: p for p in plans}
        self.plan_history: list[PlanHistory] = []
        self.bucket_history: list[LifeXpHistory] = []
        self.account_history: list[AccountHistory] = []
        self.failing: set[str] = set()
        self.calls: list[tuple] = []
        self._next_id = 100

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failing:
            raise BackendError(name.replace("_", " "), status_code=500, detail="boom")

    def _new_id(self):
        self._next_id += 1
        return self._next_id

    # buckets
    def list_buckets(self):
        self._call("list_buckets")
        return list(self.buckets.values())

    def create_bucket(self, payload):
        self._call("create_bucket", payload)
        bucket = LifeXpBucket.from_api({"id": self._new_id(), **payload})
        self.buckets[bucket.id] = bucket
        return bucket

    def update_bucket(self, bucket_id, payload):
        self._call("update_bucket", bucket_id, payload)
        current = self.buckets[bucket_id]
        bucket = LifeXpBucket.from_api(
            {"id": bucket_id, "saved_amount": current.saved_amount, "status": current.status, **payload}
        )
        self.buckets[bucket_id] = bucket
        return bucket

    def delete_bucket(self, bucket_id):
        self._call("delete_bucket", bucket_id)
        del self.buckets[bucket_id]

    def _contribute(self, bucket_id, amount, notes, next_date=None):
        bucket = self.buckets[bucket_id]
        bucket.saved_amount += amount
        if next_date is not None:
            bucket.next_contribution_date = next_date
        history = LifeXpHistory(self._new_id(), bucket_id, TODAY, amount, bucket.saved_amount, notes)
        self.bucket_history.append(history)
        return bucket, history

    def add_contribution(self, bucket_id, amount, notes=None):
        self._call("add_contribution", bucket_id, amount, notes)
        return self._contribute(bucket_id, amount, notes)

    def mark_contribution_done(self, bucket_id, amount, next_contribution_date=None, notes=None):
        self._call("mark_contribution_done", bucket_id, amount, next_contribution_date, notes)
        return self._contribute(bucket_id, amount, notes, next_contribution_date)

    def mark_bucket_achieved(self, bucket_id):
        self._call("mark_bucket_achieved", bucket_id)
        self.buckets[bucket_id].status = "achieved"
        return self.buckets[bucket_id]

    def reactivate_bucket(self, bucket_id):
        self._call("reactivate_bucket", bucket_id)
        self.buckets[bucket_id].status = "active"
        return self.buckets[bucket_id]

    def list_bucket_history(self, bucket_id):
        self._call("list_bucket_history", bucket_id)
        return [h for h in self.bucket_history if h.bucket_id == bucket_id]

    def update_bucket_history(self, entry_id, amount, notes=None, entry_date=None):
        self._call("update_bucket_history", entry_id, amount, notes, entry_date)
        entry = next(h for h in self.bucket_history if h.id == entry_id)
        updated = LifeXpHistory(
            entry.id, entry.bucket_id, entry_date or entry.date, amount, entry.total_saved, notes
        )
        self.bucket_history = [updated if h.id == entry_id else h for h in self.bucket_history]
        return updated

    def delete_bucket_history(self, entry_id):
        self._call("delete_bucket_history", entry_id)
        self.bucket_history = [h for h in self.bucket_history if h.id != entry_id]

    # plans
    def list_plans(self):
        self._call("list_plans")
        return list(self.plans.values())

    def create_plan(self, payload):
        self._call("create_plan", payload)
        plan = InsurancePlan.from_api({"id": self._new_id(), **payload})
        self.plans[plan.id] = plan
        return plan

    def update_plan(self, plan_id, payload):
        self._call("update_plan", plan_id, payload)
        plan = InsurancePlan.from_api({"id": plan_id, **payload})
        self.plans[plan_id] = plan
        return plan

    def delete_plan(self, plan_id):
        self._call("delete_plan", plan_id)
        del self.plans[plan_id]

    def list_plan_history(self, plan_id):
        self._call("list_plan_history", plan_id)
        return [h for h in self.plan_history if h.plan_id == plan_id]

    def create_plan_history(self, plan_id, entry_date, cover_amount, premium_amount, notes=None):
        self._call("create_plan_history", plan_id, entry_date, cover_amount, premium_amount, notes)
        entry = PlanHistory(self._new_id(), plan_id, entry_date, cover_amount, premium_amount, notes)
        self.plan_history.append(entry)
        return entry

    def update_plan_history(self, entry_id, cover_amount, premium_amount, notes=None, entry_date=None):
        self._call("update_plan_history", entry_id, cover_amount, premium_amount, notes, entry_date)
        entry = next(h for h in self.plan_history if h.id == entry_id)
        updated = PlanHistory(
            entry.id, entry.plan_id, entry_date or entry.date, cover_amount, premium_amount, notes
        )
        self.plan_history = [updated if h.id == entry_id else h for h in self.plan_history]
        return updated

    def delete_plan_history(self, entry_id):
        self._call("delete_plan_history", entry_id)
        self.plan_history = [h for h in self.plan_history if h.id != entry_id]

    # accounts
    def create_account_history(self, account_id, entry_date, balance, notes=None):
        self._call("create_account_history", account_id, entry_date, balance, notes)
        entry = AccountHistory(self._new_id(), account_id, entry_date, balance, notes)
        self.account_history.append(entry)
        return entry


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def lifexp_log(storage, clock):
    return ActivityLog(storage, LIFEXP_DOMAIN, clock=clock, local_tz=timezone.utc)


@pytest.fixture
def plans_log(storage, clock):
    return ActivityLog(storage, PLANS_DOMAIN, clock=clock, local_tz=timezone.utc)
