# src/todo_titans/home/date_strip.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(slots=True, frozen=True)
class DaySlot:
    day: date
    label: str
    is_today: bool


def month_label(today: date) -> str:
    return today.strftime("%B %Y")


def day_label(day: date) -> str:
    # "Sat 17": weekday abbreviation and day of month, no zero padding.
    return f"{day.strftime('%a')} {day.day}"


def build_date_strip(today: date, days: int = 7) -> list[DaySlot]:
    """Slot i is today + i days; only slot 0 is flagged as today."""
    return [
        DaySlot(day=d, label=day_label(d), is_today=(i == 0))
        for i, d in enumerate(today + timedelta(days=i) for i in range(max(0, days)))
    ]
