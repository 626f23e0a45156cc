"""
Reporting Periods

Calendar-year and calendar-month periods with the month arithmetic the
trailing-window calculations depend on.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional, Union


def as_reference_datetime(now: Union[date, datetime]) -> datetime:
    """Normalize a reference instant to a naive UTC datetime"""
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            return now.astimezone(timezone.utc).replace(tzinfo=None)
        return now
    if isinstance(now, date):
        return datetime(now.year, now.month, now.day)
    raise TypeError(f"Reference instant must be a date or datetime, got {type(now).__name__}")


@dataclass(frozen=True)
class Period:
    """
    A calendar year (month is None) or a calendar month.

    Build with Period.for_year / Period.for_month; the latter normalizes
    out-of-range months, so month 0 is December of the previous year and
    month 13 is January of the next.
    """
    year: int
    month: Optional[int] = None

    @classmethod
    def for_year(cls, year: int) -> "Period":
        return cls(year=year)

    @classmethod
    def for_month(cls, year: int, month: int) -> "Period":
        carry, index = divmod(month - 1, 12)
        return cls(year=year + carry, month=index + 1)

    @classmethod
    def year_of(cls, moment: Union[date, datetime]) -> "Period":
        return cls.for_year(moment.year)

    @classmethod
    def month_of(cls, moment: Union[date, datetime]) -> "Period":
        return cls.for_month(moment.year, moment.month)

    @property
    def is_month(self) -> bool:
        return self.month is not None

    @property
    def start(self) -> datetime:
        return datetime(self.year, self.month or 1, 1)

    @property
    def end(self) -> datetime:
        """Exclusive upper bound"""
        return self.shift(1).start

    @property
    def label(self) -> str:
        if self.is_month:
            return self.start.strftime("%b %Y")
        return str(self.year)

    def shift(self, count: int) -> "Period":
        """Period `count` steps away at the same granularity"""
        if self.is_month:
            return Period.for_month(self.year, self.month + count)
        return Period.for_year(self.year + count)

    def previous(self) -> "Period":
        return self.shift(-1)

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment < self.end


def trailing_months(now: Union[date, datetime], count: int = 12) -> List[Period]:
    """The month containing `now` and the `count - 1` months before it, oldest first"""
    if count < 1:
        raise ValueError("count must be at least 1")
    reference = as_reference_datetime(now)
    current = Period.month_of(reference)
    return [current.shift(-offset) for offset in range(count - 1, -1, -1)]
