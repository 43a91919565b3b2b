from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable


@dataclass(frozen=True)
class DateKey:
    """A calendar day used to bucket aims. Equal and hashed by (year, month, day)."""
    year: int
    month: int
    day: int

    @classmethod
    def from_date(cls, d: date) -> "DateKey":
        return cls(d.year, d.month, d.day)

    @classmethod
    def today(cls) -> "DateKey":
        return cls.from_date(date.today())

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def is_today(self, today: date) -> bool:
        return self == DateKey.from_date(today)

    def in_month(self, year_month) -> bool:
        return self.year == year_month.year and self.month == year_month.month

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self):
        return self.isoformat()


def key_of(today: date, offset_from_today: int) -> DateKey:
    return DateKey.from_date(today + timedelta(days=offset_from_today))


def offset_in_range(offset_from_today: int, today: date = None) -> bool:
    """True when today + offset is still a representable calendar day."""
    try:
        key_of(today or date.today(), offset_from_today)
    except OverflowError:
        return False
    return True


@dataclass(frozen=True)
class Aim:
    id: int
    offset_from_today: int
    is_accomplished: bool = False
    is_favorited: bool = False
    description: str = ""

    def date_key(self, today: date) -> DateKey:
        # Relative to the given today, so the day moves between runs.
        return key_of(today, self.offset_from_today)

    def status(self) -> str:
        """'accomplished', 'missed' (past and not done) or 'pending'."""
        if self.is_accomplished:
            return "accomplished"
        if self.offset_from_today < 0:
            return "missed"
        return "pending"


class FilterCriterion(str, Enum):
    ALL = "all"
    ACCOMPLISHED = "accomplished"
    FAVORITED = "favorited"

    @classmethod
    def parse(cls, value: str) -> "FilterCriterion":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(c.value for c in cls)
            raise ValueError(
                f"Unknown filter '{value}' (expected one of: {choices})") from None

    @property
    def display_string(self) -> str:
        return self.value.capitalize()

    def matches(self, aim: Aim) -> bool:
        return predicate_for(self)(aim)

    def next(self) -> "FilterCriterion":
        members = list(FilterCriterion)
        return members[(members.index(self) + 1) % len(members)]


_PREDICATES = {
    FilterCriterion.ALL: lambda aim: True,
    FilterCriterion.ACCOMPLISHED: lambda aim: aim.is_accomplished,
    FilterCriterion.FAVORITED: lambda aim: aim.is_favorited,
}


def predicate_for(criterion: FilterCriterion) -> Callable[[Aim], bool]:
    return _PREDICATES[FilterCriterion(criterion)]
