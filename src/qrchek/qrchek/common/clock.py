from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Protocol

import pytz


def get_timezone(name: str) -> tzinfo:
    return pytz.timezone(name)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (e.g. AUTO_CHECKOUT_TIME) into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def local_midnight(tz: tzinfo, day: date) -> datetime:
    return localize(tz, datetime.combine(day, time.min))


def localize(tz: tzinfo, naive: datetime) -> datetime:
    # pytz zones need localize(); plain tzinfo objects accept replace().
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


class Clock(Protocol):
    tz: tzinfo

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Current wall clock in the deployment timezone.

    Note: Wrapped so services never call datetime.now() directly and tests can
    swap in FixedClock.
    """

    def __init__(self, tz: tzinfo):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    def __init__(self, now: datetime):
        if now.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime")
        self.tz = now.tzinfo
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


def latest_cutoff(now: datetime, cutoff: time, tz: tzinfo) -> datetime:
    """Most recent daily cutoff instant at or before ``now``."""

    local_now = now.astimezone(tz)
    today_cutoff = localize(tz, datetime.combine(local_now.date(), cutoff))
    if today_cutoff <= local_now:
        return today_cutoff
    return localize(tz, datetime.combine(local_now.date() - timedelta(days=1), cutoff))
