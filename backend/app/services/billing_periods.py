"""Billing period keys, due-date policy and overdue arithmetic."""

import calendar as cal
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def local_today(timezone: str | None = None) -> date:
    """Today's date in the given IANA timezone (defaults to the configured one)."""
    return datetime.now(ZoneInfo(timezone or settings.BILLING_DEFAULT_TIMEZONE)).date()


@dataclass(frozen=True, order=True)
class BillingPeriod:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")

    @classmethod
    def from_date(cls, day: date) -> "BillingPeriod":
        return cls(day.year, day.month)

    @classmethod
    def current(cls, timezone: str | None = None) -> "BillingPeriod":
        return cls.from_date(local_today(timezone))

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, cal.monthrange(self.year, self.month)[1])

    def __str__(self) -> str:
        return self.key


def due_date(period: BillingPeriod, due_day: int | None = None) -> date:
    """Due date for every charge of ``period``: a fixed day, clamped to the month length."""
    day = due_day if due_day is not None else settings.BILLING_DUE_DAY
    max_day = cal.monthrange(period.year, period.month)[1]
    return date(period.year, period.month, max(1, min(day, max_day)))


def days_overdue(period: BillingPeriod, today: date) -> int:
    return max(0, (today - due_date(period)).days)


def is_cycle_start(today: date) -> bool:
    """Whether ``today`` is the day automatic generation is offered."""
    return today.day == settings.BILLING_CYCLE_DAY
