from datetime import timedelta

from conftest import TODAY, FakeApi
from models.bucket import LifeXpBucket
from models.plan import InsurancePlan
from services.lifexp_service import LifeXpService
from services.plan_service import PlanService
from services.reminder_service import build_digest


def _services(api, lifexp_log, plans_log, storage):
    return LifeXpService(api, lifexp_log), PlanService(api, plans_log, storage)


def test_digest_lists_due_buckets_and_plans(lifexp_log, plans_log, storage):
    api = FakeApi(
        buckets=[
            LifeXpBucket(1, "Car", 60000, is_repetitive=True, contribution_frequency="monthly",
                         next_contribution_date=TODAY + timedelta(days=2)),
        ],
        plans=[
            InsurancePlan(2, "Term", 1e7, 12000, "yearly", next_premium_date=TODAY - timedelta(days=1)),
        ],
    )
    digest = build_digest(*_services(api, lifexp_log, plans_log, storage), TODAY)
    assert "#1 Car: due in 2d" in digest
    assert "#2 Term: premium overdue by 1 day" in digest


def test_digest_is_none_when_nothing_due(lifexp_log, plans_log, storage):
    api = FakeApi(
        buckets=[LifeXpBucket(1, "Car", 60000)],
        plans=[InsurancePlan(2, "Term", 1e7, 12000, "yearly", next_premium_date=TODAY + timedelta(days=90))],
    )
    assert build_digest(*_services(api, lifexp_log, plans_log, storage), TODAY) is None
