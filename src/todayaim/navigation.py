import calendar
from dataclasses import dataclass
from datetime import date
from typing import List

from .model import DateKey


@dataclass(frozen=True)
class YearMonth:
    year: int
    month: int

    @classmethod
    def current(cls, today: date = None) -> "YearMonth":
        today = today or date.today()
        return cls(today.year, today.month)

    def advance(self, direction: int) -> "YearMonth":
        if direction not in (1, -1):
            raise ValueError(f"direction must be +1 or -1, got {direction}")
        index = self.year * 12 + (self.month - 1) + direction
        return YearMonth(index // 12, index % 12 + 1)

    @property
    def short_label(self) -> str:
        return f"{calendar.month_abbr[self.month]} {self.year}"

    @property
    def long_label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def weeks(self, first_weekday: int = calendar.SUNDAY) -> List[List[DateKey]]:
        """Week rows for the grid, padded with days of the adjacent months."""
        cal = calendar.Calendar(firstweekday=first_weekday)
        return [[DateKey.from_date(d) for d in week]
                for week in cal.monthdatescalendar(self.year, self.month)]

    def __str__(self):
        return f"{self.year:04d}-{self.month:02d}"
