"""
services/registry.py
--------------------
Builds the shared service instances from config.

Handlers call ``get_services()`` instead of constructing services at import
time, so importing a handler never opens files, sockets or DB pools.
"""

from dataclasses import dataclass, field
from functools import lru_cache

from config import (
    ACTIVITY_LOG_MAX_ENTRIES,
    API_BASE_URL,
    BUCKET_DUE_SOON_DAYS,
    DEFAULT_CURRENCY,
    PLAN_DUE_SOON_DAYS,
    PLAN_EXPIRING_SOON_DAYS,
    STORAGE_BACKEND,
    STORAGE_PATH,
)
from repositories.api_client import ApiClient
from repositories.storage import StoragePort, build_storage
from services.account_service import AccountService
from services.activity_log import LIFEXP_DOMAIN, PLANS_DOMAIN, ActivityLog
from services.lifexp_service import LifeXpService
from services.notes_service import NOTES_KEYS, NotesService
from services.plan_service import PlanService
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    storage: StoragePort
    api: ApiClient
    lifexp: LifeXpService
    plans: PlanService
    accounts: AccountService
    logs: dict[str, ActivityLog] = field(default_factory=dict)
    notes: dict[str, NotesService] = field(default_factory=dict)

    def close(self) -> None:
        self.api.close()


def build_services(storage: StoragePort, api: ApiClient) -> Services:
    """Wire services around an existing storage and API client."""
    lifexp_log = ActivityLog(storage, LIFEXP_DOMAIN, max_entries=ACTIVITY_LOG_MAX_ENTRIES)
    plans_log = ActivityLog(storage, PLANS_DOMAIN, max_entries=ACTIVITY_LOG_MAX_ENTRIES)
    return Services(
        storage=storage,
        api=api,
        lifexp=LifeXpService(api, lifexp_log, BUCKET_DUE_SOON_DAYS, DEFAULT_CURRENCY),
        plans=PlanService(
            api, plans_log, storage, PLAN_DUE_SOON_DAYS, PLAN_EXPIRING_SOON_DAYS, DEFAULT_CURRENCY
        ),
        accounts=AccountService(api),
        logs={"lifexp": lifexp_log, "plans": plans_log},
        notes={name: NotesService(storage, key) for name, key in NOTES_KEYS.items()},
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    """The process-wide services, created on first use."""
    logger.info(f"Connecting to backend at {API_BASE_URL}")
    storage = build_storage(STORAGE_BACKEND, STORAGE_PATH)
    return build_services(storage, ApiClient(API_BASE_URL))
