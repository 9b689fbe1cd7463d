"""Free-text date-range parsing for employment gap analysis.

Dates are converted to month indices (``year * 12 + month``, month 0-11) so
that gaps can be computed with plain subtraction.
"""

import re
from dataclasses import dataclass
from datetime import date

MONTHS: dict[str, int] = {
    "jan": 0, "january": 0, "janeiro": 0,
    "feb": 1, "february": 1, "fev": 1, "fevereiro": 1,
    "mar": 2, "march": 2, "marco": 2, "março": 2,
    "apr": 3, "april": 3, "abr": 3, "abril": 3,
    "may": 4, "mai": 4, "maio": 4,
    "jun": 5, "june": 5, "junho": 5,
    "jul": 6, "july": 6, "julho": 6,
    "aug": 7, "august": 7, "ago": 7, "agosto": 7,
    "sep": 8, "sept": 8, "september": 8, "set": 8, "setembro": 8,
    "oct": 9, "october": 9, "out": 9, "outubro": 9,
    "nov": 10, "november": 10, "novembro": 10,
    "dec": 11, "december": 11, "dez": 11, "dezembro": 11,
}

MIN_YEAR = 1900
MAX_YEAR = 2100

_MONTH_YEAR = re.compile(r"([a-záéíóúâêôãõç]+)\s+(\d{4})", re.IGNORECASE)
_MM_YYYY = re.compile(r"(\d{1,2})/(\d{4})")
_YYYY = re.compile(r"\b(\d{4})\b")
_PRESENT = re.compile(r"present|atual|presente", re.IGNORECASE)
_RANGE_DELIMITER = re.compile(r"\s*[-–—]\s*|\s+to\s+|\s+a\s+", re.IGNORECASE)


@dataclass(frozen=True)
class DateRange:
    """Inclusive span in month indices."""

    start: int
    end: int


def month_index(year: int, month: int) -> int:
    """Return the month index for a 0-based *month* of *year*."""
    return year * 12 + month


def current_month(today: date | None = None) -> int:
    today = today or date.today()
    return month_index(today.year, today.month - 1)


def parse_month_year(text: str) -> int | None:
    """Parse a single date token into a month index.

    Tries "<Month> YYYY" (English or Portuguese names), then "MM/YYYY", then a
    bare year, which is placed mid-year.
    """
    match = _MONTH_YEAR.search(text)
    if match:
        month = MONTHS.get(match.group(1).lower())
        year = int(match.group(2))
        if month is not None and MIN_YEAR <= year <= MAX_YEAR:
            return month_index(year, month)

    match = _MM_YYYY.search(text)
    if match:
        month = int(match.group(1)) - 1
        year = int(match.group(2))
        if 0 <= month <= 11 and MIN_YEAR <= year <= MAX_YEAR:
            return month_index(year, month)

    match = _YYYY.search(text)
    if match:
        year = int(match.group(1))
        if MIN_YEAR <= year <= MAX_YEAR:
            return month_index(year, 6)

    return None


def is_present(text: str) -> bool:
    return _PRESENT.search(text) is not None


def parse_date_range(text: str, today: date | None = None) -> DateRange | None:
    """Parse a free-text range such as "Jan 2022 - Present" or "01/2019 a 12/2020".

    Returns None when no recognisable date is found. Never raises.
    """
    present = is_present(text)
    parts = _RANGE_DELIMITER.split(text)

    if len(parts) >= 2:
        start = parse_month_year(parts[0])
        end = current_month(today) if present else parse_month_year(parts[-1])
        if start is not None and end is not None:
            return DateRange(start, end)
        return None

    value = parse_month_year(parts[0])
    if value is None:
        return None
    return DateRange(value, current_month(today) if present else value)


def has_gap(ranges: list[DateRange], max_gap_months: int = 6) -> bool:
    """Return True if consecutive ranges, most recent first, leave a gap over *max_gap_months*."""
    ordered = sorted(ranges, key=lambda r: r.end, reverse=True)
    return any(current.start - following.end > max_gap_months for current, following in zip(ordered, ordered[1:]))
