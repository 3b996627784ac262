# Overview: Date rendering and parsing driven by a user's display preferences.

"""
Display formatting.

Preferences travel as an explicit DisplayPreferences value built from the
user's profile; nothing here reads ambient settings. Formatting never raises:
unparsable input comes back as text, unparsable user dates parse to None.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from salesdash.time_utils import parse_iso_datetime


FORMAT_US = "MM/DD/YYYY"
FORMAT_EU = "DD/MM/YYYY"
FORMAT_ISO = "YYYY-MM-DD"
DATE_FORMATS = (FORMAT_US, FORMAT_EU, FORMAT_ISO)
DEFAULT_DATE_FORMAT = FORMAT_US

_DATE_PATTERNS = {
    FORMAT_US: "%m/%d/%Y",
    FORMAT_EU: "%d/%m/%Y",
    FORMAT_ISO: "%Y-%m-%d",
}


@dataclass(frozen=True)
class DisplayPreferences:
    date_format: str = DEFAULT_DATE_FORMAT
    dark_mode: bool = False

    @classmethod
    def from_profile(cls, profile) -> "DisplayPreferences":
        if profile is None:
            return cls()
        fmt = getattr(profile, "date_format", None)
        if fmt not in DATE_FORMATS:
            fmt = DEFAULT_DATE_FORMAT
        return cls(date_format=fmt, dark_mode=bool(getattr(profile, "dark_mode", False)))

    def to_dict(self) -> dict:
        return {"date_format": self.date_format, "dark_mode": self.dark_mode}


def _coerce(value) -> datetime | date | None:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except ValueError:
            return None
    return None


def _date_pattern(prefs: DisplayPreferences) -> str:
    return _DATE_PATTERNS.get(prefs.date_format, _DATE_PATTERNS[DEFAULT_DATE_FORMAT])


def format_datetime(value, prefs: DisplayPreferences) -> str:
    """
    MM/DD/YYYY -> "03/05/2024 2:07 PM"
    DD/MM/YYYY -> "05/03/2024 14:07"
    YYYY-MM-DD -> "2024-03-05 14:07"
    """
    if value is None or value == "":
        return ""
    dt = _coerce(value)
    if dt is None:
        return str(value)
    if not isinstance(dt, datetime):
        dt = datetime(dt.year, dt.month, dt.day)

    day = dt.strftime(_date_pattern(prefs))
    if prefs.date_format == FORMAT_US:
        hour = dt.hour % 12 or 12
        return f"{day} {hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"
    return f"{day} {dt.hour:02d}:{dt.minute:02d}"


def format_date(value, prefs: DisplayPreferences) -> str:
    if value is None or value == "":
        return ""
    d = _coerce(value)
    if d is None:
        return str(value)
    return d.strftime(_date_pattern(prefs))


def parse_user_date(text: str | None, prefs: DisplayPreferences) -> date | None:
    """Parse a date typed in the user's preferred format."""
    if not text:
        return None
    try:
        return datetime.strptime(text.strip(), _date_pattern(prefs)).date()
    except ValueError:
        return None


def format_modifier_info(name: str | None, modified_at, prefs: DisplayPreferences) -> str:
    """Two-line "who / when" caption for the last modification."""
    if not name or not modified_at:
        return "N/A"
    dt = _coerce(modified_at)
    if dt is None:
        return f"{name}\nUnknown date"
    return f"{name}\n{format_datetime(dt, prefs)}"
