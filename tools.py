import math
import datetime
from typing import Optional


class ValueTools:
    """Coercion helpers for user supplied numeric fields."""

    @staticmethod
    def to_number(value, integer: bool = False) -> float | int:
        """Return ``value`` as a number, treating anything non-numeric as 0."""
        if value is None or isinstance(value, bool):
            return 0
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return 0
        try:
            num = float(value)
        except (TypeError, ValueError):
            return 0
        if math.isnan(num) or math.isinf(num):
            return 0
        return int(num) if integer else num

    @classmethod
    def positive(cls, value) -> Optional[float]:
        """Return the numeric value when it is greater than zero."""
        num = cls.to_number(value)
        return num if num > 0 else None

    @staticmethod
    def text(value: Optional[str]) -> str:
        return value if value else ""


class DateTools:
    """Local date helpers. Dates are ``YYYY-MM-DD`` strings."""

    DATE_FMT = "%Y-%m-%d"
    TIMESTAMP_FMT = "%Y-%m-%dT%H:%M:%S"

    @staticmethod
    def local_date(today: Optional[datetime.date] = None) -> str:
        return (today or datetime.date.today()).strftime(DateTools.DATE_FMT)

    @staticmethod
    def local_timestamp(now: Optional[datetime.datetime] = None) -> str:
        return (now or datetime.datetime.now()).strftime(DateTools.TIMESTAMP_FMT)

    @staticmethod
    def parse_date(value: str | datetime.date) -> datetime.date:
        if isinstance(value, datetime.date):
            return value
        return datetime.datetime.strptime(value[:10], DateTools.DATE_FMT).date()

    @classmethod
    def start_of_week(cls, today: Optional[datetime.date] = None) -> str:
        """Return the Monday of the ISO week containing ``today``.

        Sunday belongs to the week that started six days earlier.
        """
        day = today or datetime.date.today()
        monday = day - datetime.timedelta(days=day.isoweekday() - 1)
        return cls.local_date(monday)

    @classmethod
    def start_of_month(cls, today: Optional[datetime.date] = None) -> str:
        day = today or datetime.date.today()
        return cls.local_date(day.replace(day=1))

    @staticmethod
    def short_label(date: str) -> str:
        """Return ``DD/MM`` for a ``YYYY-MM-DD`` string."""
        parts = date[:10].split("-")
        return f"{parts[2]}/{parts[1]}"
