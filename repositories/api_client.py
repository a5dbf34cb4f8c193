"""
repositories/api_client.py
--------------------------
HTTP client for the finance REST backend (Life XP buckets, insurance plans,
accounts and their history rows).

Each method maps to one endpoint and returns domain objects. Every mutation
returns the updated resource as the backend sends it. Failures are raised as
BackendError; nothing is retried.
"""

from datetime import date
from typing import Any, Optional

import httpx

from models.account import Account, AccountHistory
from models.bucket import LifeXpBucket, LifeXpHistory
from models.plan import InsurancePlan, PlanHistory
from utils.errors import BackendError
from utils.logger import get_logger

logger = get_logger(__name__)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class ApiClient:
    """
    Thin wrapper over an httpx.Client bound to the backend base URL.

    Args:
        base_url: e.g. 'http://localhost:3000'.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(self, base_url: str, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, operation: str, json: Optional[dict] = None) -> Any:
        """
        Perform one request and decode the JSON body.

        Raises:
            BackendError: Transport failure or a 4xx/5xx answer.
        """
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Backend unreachable while trying to {operation}: {e}")
            raise BackendError(operation, detail=str(e)) from e

        if response.is_error:
            logger.error(f"Backend refused to {operation} ({response.status_code}): {response.text}")
            raise BackendError(operation, status_code=response.status_code, detail=response.text)

        if not response.content:
            return None
        return response.json()

    # ── LIFE XP BUCKETS ───────────────────────────────────

    def list_buckets(self) -> list[LifeXpBucket]:
        rows = self._request("GET", "/resources/life-xp", "fetch life xp buckets")
        return [LifeXpBucket.from_api(r) for r in rows or []]

    def create_bucket(self, payload: dict) -> LifeXpBucket:
        """
        Create a bucket.

        Args:
            payload: name, target_amount, is_repetitive, contribution_frequency,
                next_contribution_date, notes, custom_frequency_days.
        """
        return LifeXpBucket.from_api(
            self._request("POST", "/resources/life-xp", "create bucket", json=payload)
        )

    def update_bucket(self, bucket_id: int, payload: dict) -> LifeXpBucket:
        return LifeXpBucket.from_api(
            self._request("PUT", f"/resources/life-xp/{bucket_id}", "update bucket", json=payload)
        )

    def delete_bucket(self, bucket_id: int) -> None:
        self._request("DELETE", f"/resources/life-xp/{bucket_id}", "delete bucket")

    def add_contribution(
        self, bucket_id: int, amount: float, notes: Optional[str] = None
    ) -> tuple[LifeXpBucket, LifeXpHistory]:
        data = self._request(
            "POST",
            f"/resources/life-xp/{bucket_id}/contribute",
            "add contribution",
            json={"amount": amount, "notes": notes},
        )
        return LifeXpBucket.from_api(data["bucket"]), LifeXpHistory.from_api(data["history"])

    def mark_contribution_done(
        self,
        bucket_id: int,
        amount: float,
        next_contribution_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> tuple[LifeXpBucket, LifeXpHistory]:
        data = self._request(
            "POST",
            f"/resources/life-xp/{bucket_id}/mark-done",
            "mark contribution done",
            json={
                "amount": amount,
                "notes": notes,
                "next_contribution_date": _iso(next_contribution_date),
            },
        )
        return LifeXpBucket.from_api(data["bucket"]), LifeXpHistory.from_api(data["history"])

    def mark_bucket_achieved(self, bucket_id: int) -> LifeXpBucket:
        return LifeXpBucket.from_api(
            self._request("POST", f"/resources/life-xp/{bucket_id}/achieved", "mark as achieved")
        )

    def reactivate_bucket(self, bucket_id: int) -> LifeXpBucket:
        return LifeXpBucket.from_api(
            self._request("POST", f"/resources/life-xp/{bucket_id}/reactivate", "reactivate")
        )

    def list_bucket_history(self, bucket_id: int) -> list[LifeXpHistory]:
        rows = self._request("GET", f"/resources/life-xp/{bucket_id}/history", "fetch history")
        return [LifeXpHistory.from_api(r) for r in rows or []]

    def update_bucket_history(
        self, entry_id: int, amount: float, notes: Optional[str] = None, entry_date: Optional[date] = None
    ) -> LifeXpHistory:
        return LifeXpHistory.from_api(
            self._request(
                "PUT",
                f"/resources/life-xp-history/{entry_id}",
                "update history entry",
                json={"amount": amount, "notes": notes, "date": _iso(entry_date)},
            )
        )

    def delete_bucket_history(self, entry_id: int) -> None:
        self._request("DELETE", f"/resources/life-xp-history/{entry_id}", "delete history entry")

    # ── INSURANCE PLANS ───────────────────────────────────

    def list_plans(self) -> list[InsurancePlan]:
        rows = self._request("GET", "/resources/plans", "fetch plans")
        return [InsurancePlan.from_api(r) for r in rows or []]

    def create_plan(self, payload: dict) -> InsurancePlan:
        """
        Create a plan.

        Args:
            payload: name, cover_amount, premium_amount, premium_frequency,
                expiry_date, next_premium_date, notes, custom_frequency_days.
        """
        return InsurancePlan.from_api(
            self._request("POST", "/resources/plans", "create plan", json=payload)
        )

    def update_plan(self, plan_id: int, payload: dict) -> InsurancePlan:
        return InsurancePlan.from_api(
            self._request("PUT", f"/resources/plans/{plan_id}", "update plan", json=payload)
        )

    def delete_plan(self, plan_id: int) -> None:
        self._request("DELETE", f"/resources/plans/{plan_id}", "delete plan")

    def list_plan_history(self, plan_id: int) -> list[PlanHistory]:
        rows = self._request("GET", f"/resources/plans/{plan_id}/history", "fetch plan history")
        return [PlanHistory.from_api(r) for r in rows or []]

    def create_plan_history(
        self,
        plan_id: int,
        entry_date: date,
        cover_amount: float,
        premium_amount: float,
        notes: Optional[str] = None,
    ) -> PlanHistory:
        return PlanHistory.from_api(
            self._request(
                "POST",
                f"/resources/plans/{plan_id}/history",
                "create plan history entry",
                json={
                    "date": _iso(entry_date),
                    "cover_amount": cover_amount,
                    "premium_amount": premium_amount,
                    "notes": notes,
                },
            )
        )

    def update_plan_history(
        self,
        entry_id: int,
        cover_amount: float,
        premium_amount: float,
        notes: Optional[str] = None,
        entry_date: Optional[date] = None,
    ) -> PlanHistory:
        return PlanHistory.from_api(
            self._request(
                "PUT",
                f"/resources/plan-history/{entry_id}",
                "update plan history entry",
                json={
                    "cover_amount": cover_amount,
                    "premium_amount": premium_amount,
                    "notes": notes,
                    "date": _iso(entry_date),
                },
            )
        )

    def delete_plan_history(self, entry_id: int) -> None:
        self._request("DELETE", f"/resources/plan-history/{entry_id}", "delete plan history entry")

    # ── ACCOUNTS ──────────────────────────────────────────

    def list_accounts(self) -> list[Account]:
        rows = self._request("GET", "/resources/accounts", "fetch accounts")
        return [Account.from_api(r) for r in rows or []]

    def list_account_history(self, account_id: int) -> list[AccountHistory]:
        rows = self._request("GET", f"/resources/accounts/{account_id}/history", "fetch history")
        return [AccountHistory.from_api(r) for r in rows or []]

    def create_account_history(
        self, account_id: int, entry_date: date, balance: float, notes: Optional[str] = None
    ) -> AccountHistory:
        return AccountHistory.from_api(
            self._request(
                "POST",
                f"/resources/accounts/{account_id}/history",
                "create history entry",
                json={"date": _iso(entry_date), "balance": balance, "notes": notes},
            )
        )
