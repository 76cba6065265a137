from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Dict, Iterable, Tuple, Union

from .types import DateWindow, NormalizedTransaction, ResolvedTimeframe, Timeframe

# timeframe -> (offset of the window's last month from "now", months spanned)
_MONTH_SPANS: Dict[Timeframe, Tuple[int, int]] = {
    Timeframe.THIS_MONTH: (0, 1),
    Timeframe.LAST_MONTH: (-1, 1),
    Timeframe.LAST_TWO_MONTHS: (0, 2),
    Timeframe.LAST_THREE_MONTHS: (0, 3),
    Timeframe.LAST_SIX_MONTHS: (0, 6),
    Timeframe.THIS_YEAR: (0, 12),
}


def parse_timeframe(value: Union[str, Timeframe]) -> Timeframe:
    if isinstance(value, Timeframe):
        return value
    try:
        return Timeframe(value)
    except ValueError:
        valid = ", ".join(t.value for t in Timeframe)
        raise ValueError(f"Unknown timeframe {value!r}; expected one of: {valid}")


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_window(year: int, month: int, months: int = 1) -> DateWindow:
    """Window covering ``months`` whole calendar months starting at year/month."""
    end_year, end_month = shift_month(year, month, months - 1)
    return DateWindow(
        start=date(year, month, 1),
        end=date(end_year, end_month, days_in_month(end_year, end_month)),
    )


def _as_date(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def days_elapsed(window: DateWindow, today: date) -> int:
    if today < window.start:
        return 0
    if today > window.end:
        return window.days
    return (today - window.start).days + 1


def resolve_timeframe(timeframe: Union[str, Timeframe], now: Union[date, datetime]) -> ResolvedTimeframe:
    """
    Map a timeframe selector to calendar-aligned current and previous windows.

    The previous window always spans the same number of calendar months and
    ends on the day before the current window starts. ``elapsed_ratio`` is only
    defined for single-month windows.
    """
    timeframe = parse_timeframe(timeframe)
    today = _as_date(now)

    if timeframe is Timeframe.THIS_YEAR:
        current = month_window(today.year, 1, 12)
        previous = month_window(today.year - 1, 1, 12)
        months = 12
    else:
        end_offset, months = _MONTH_SPANS[timeframe]
        start_year, start_month = shift_month(today.year, today.month, end_offset - (months - 1))
        current = month_window(start_year, start_month, months)
        prev_year, prev_month = shift_month(start_year, start_month, -months)
        previous = month_window(prev_year, prev_month, months)

    elapsed = days_elapsed(current, today)
    ratio = elapsed / current.days if months == 1 and current.days > 0 else None

    return ResolvedTimeframe(
        timeframe=timeframe,
        current=current,
        previous=previous,
        days_elapsed=elapsed,
        elapsed_ratio=ratio,
    )


def calendar_months(window: DateWindow) -> Iterable[Tuple[int, int, int]]:
    """Yield (year, month, days of the window inside that month)."""
    year, month = window.start.year, window.start.month
    while date(year, month, 1) <= window.end:
        first = max(window.start, date(year, month, 1))
        last = min(window.end, date(year, month, days_in_month(year, month)))
        yield year, month, (last - first).days + 1
        year, month = shift_month(year, month, 1)


def in_window(
    entries: Iterable[NormalizedTransaction],
    window: DateWindow,
) -> Tuple[NormalizedTransaction, ...]:
    return tuple(entry for entry in entries if window.contains(entry.transaction.date))


def before(
    entries: Iterable[NormalizedTransaction],
    day: date,
) -> Tuple[NormalizedTransaction, ...]:
    return tuple(entry for entry in entries if entry.transaction.date < day)
