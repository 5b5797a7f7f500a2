"""Parsing helpers for the string formats used by the stats API."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

_HEIGHT_RE = re.compile(r"^\s*(\d+)\s*'\s*(\d+)?\s*\"?\s*$")


@dataclass(frozen=True)
class Height:
    feet: int
    inches: int

    @property
    def cm(self) -> float:
        return (self.feet * 12 + self.inches) * 2.54

    def __str__(self) -> str:
        return f"{self.feet}' {self.inches}\""


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse "YYYY-MM-DD" (anything after the date is ignored)."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 UTC timestamp such as "2021-11-23T00:00:00Z"."""
    if not value:
        return None
    cleaned = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_clock(value: Optional[str]) -> Optional[timedelta]:
    """Parse "MM:SS" or "HH:MM:SS" game clock strings."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        return None
    numbers = [int(part) for part in parts]
    if len(numbers) == 2:
        numbers.insert(0, 0)
    hours, minutes, seconds = numbers
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def parse_height(value: Optional[str]) -> Optional[Height]:
    if not value:
        return None
    match = _HEIGHT_RE.match(value)
    if match is None:
        return None
    return Height(feet=int(match.group(1)), inches=int(match.group(2) or 0))


def parse_number(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def pounds_to_kg(pounds: float) -> float:
    return pounds * 0.45359237
