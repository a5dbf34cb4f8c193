"""
models/account.py
-----------------
Domain models for bank accounts and their balance history.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from utils.dates import parse_optional_date


@dataclass
class Account:
    id: int
    name: str
    balance: float
    notes: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Account":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            balance=float(data.get("balance") or 0),
            notes=data.get("notes"),
        )


@dataclass
class AccountHistory:
    """A dated balance snapshot of an account."""
    id: int
    account_id: int
    date: date
    balance: float
    notes: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "AccountHistory":
        return cls(
            id=int(data["id"]),
            account_id=int(data["account_id"]),
            date=parse_optional_date(data["date"]),
            balance=float(data.get("balance") or 0),
            notes=data.get("notes"),
        )
