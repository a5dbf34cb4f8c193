"""
models/frequency.py
-------------------
Recurrence frequency of a savings contribution or an insurance premium.

A Frequency is a tagged value: one of the fixed kinds, or ``custom`` carrying
a positive number of days. The constructor rejects every other combination,
so a ``custom`` frequency without a day count cannot exist.
"""

from dataclasses import dataclass
from typing import Optional

from utils.errors import InvalidFrequencyError

MONTHLY = "monthly"
QUARTERLY = "quarterly"
HALF_YEARLY = "half_yearly"
YEARLY = "yearly"
CUSTOM = "custom"

ALL_KINDS = (MONTHLY, QUARTERLY, HALF_YEARLY, YEARLY, CUSTOM)
# Life XP buckets cannot recur half-yearly; insurance plans can.
BUCKET_KINDS = (MONTHLY, QUARTERLY, YEARLY, CUSTOM)
PLAN_KINDS = ALL_KINDS

_LABELS = {
    MONTHLY: "Monthly",
    QUARTERLY: "Quarterly",
    HALF_YEARLY: "Half Yearly",
    YEARLY: "Yearly",
}


@dataclass(frozen=True)
class Frequency:
    """
    Attributes:
        kind: One of ALL_KINDS.
        days: Period length in days; set only (and always) for CUSTOM.
    """
    kind: str
    days: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind not in ALL_KINDS:
            raise InvalidFrequencyError(f"Unknown frequency: {self.kind!r}")
        if self.kind == CUSTOM:
            if not isinstance(self.days, int) or isinstance(self.days, bool) or self.days <= 0:
                raise InvalidFrequencyError(
                    f"Custom frequency needs a positive day count, got {self.days!r}"
                )
        elif self.days is not None:
            raise InvalidFrequencyError(f"Frequency {self.kind!r} takes no day count")

    # ── Constructors ──────────────────────────────────────

    @classmethod
    def monthly(cls) -> "Frequency":
        return cls(MONTHLY)

    @classmethod
    def quarterly(cls) -> "Frequency":
        return cls(QUARTERLY)

    @classmethod
    def half_yearly(cls) -> "Frequency":
        return cls(HALF_YEARLY)

    @classmethod
    def yearly(cls) -> "Frequency":
        return cls(YEARLY)

    @classmethod
    def custom(cls, days: int) -> "Frequency":
        return cls(CUSTOM, days)

    @classmethod
    def parse(
        cls,
        kind: Optional[str],
        custom_days: Optional[int] = None,
        allowed: tuple[str, ...] = ALL_KINDS,
    ) -> "Frequency":
        """
        Build a Frequency from its wire form (kind string + custom day count).

        The backend sends ``custom_frequency_days`` for every row, usually null;
        it is only looked at for the custom kind.

        Raises:
            InvalidFrequencyError: unknown or disallowed kind, or a custom kind
                without a positive day count.
        """
        if not kind:
            raise InvalidFrequencyError("Frequency is missing")
        kind = kind.strip().lower()
        if kind not in allowed:
            raise InvalidFrequencyError(f"Frequency {kind!r} is not allowed here")
        if kind == CUSTOM:
            try:
                days = int(custom_days) if custom_days is not None else None
            except (TypeError, ValueError):
                raise InvalidFrequencyError(f"Invalid custom day count: {custom_days!r}")
            return cls(CUSTOM, days)
        return cls(kind)

    # ── Presentation ──────────────────────────────────────

    @property
    def label(self) -> str:
        """Human readable label, e.g. 'Quarterly' or 'Every 10 days'."""
        if self.kind == CUSTOM:
            return f"Every {self.days} days"
        return _LABELS[self.kind]

    def __str__(self) -> str:
        return self.label
