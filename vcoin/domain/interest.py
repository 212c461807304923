"""Compound interest engine - projects the value of dated investments"""

from datetime import datetime
from typing import Dict, List, Optional

from vcoin.config import settings as app_settings
from vcoin.domain.models import ClassSettings, Investment, InvestmentStats, InvestmentSummary
from vcoin.utils.date_utils import (
    days_between,
    end_of_day,
    ensure_utc,
    school_year_start,
    seconds_between,
    utc_now,
)

DAYS_PER_MONTH = 30
SECONDS_PER_MONTH = DAYS_PER_MONTH * 24 * 3600  # 2,592,000


def daily_rate(monthly_rate: float) -> float:
    """Convert a monthly rate to its compound daily equivalent: (1 + r)^(1/30) - 1"""
    return (1 + monthly_rate) ** (1 / DAYS_PER_MONTH) - 1


def seconds_rate(monthly_rate: float) -> float:
    """Convert a monthly rate to its compound per-second equivalent"""
    return (1 + monthly_rate) ** (1 / SECONDS_PER_MONTH) - 1


def effective_monthly_rate(settings: ClassSettings) -> float:
    """Class rate, or the configured default when the class has none"""
    if settings.current_monthly_interest_rate is None:
        return app_settings.default_monthly_interest_rate
    return settings.current_monthly_interest_rate


def value_at(instant: datetime, investments: List[Investment], monthly_rate: float) -> float:
    """
    Compounded value of all investments at an instant, with per-second precision.

    Investments dated after the instant contribute nothing; one dated exactly
    at the instant is worth its principal.
    """
    if not investments:
        return 0.0

    rate = seconds_rate(monthly_rate)
    total = 0.0
    instant = ensure_utc(instant)
    for item in investments:
        if ensure_utc(item.fecha) > instant:
            continue
        total += item.monto * (1 + rate) ** seconds_between(instant, item.fecha)
    return total


def value_at_by_days(instant: datetime, investments: List[Investment], monthly_rate: float) -> float:
    """
    Day-granularity variant of value_at.

    The contribution day counts as a full day of growth, so an investment
    evaluated on its own date has already compounded once.
    """
    if not investments:
        return 0.0

    rate = daily_rate(monthly_rate)
    total = 0.0
    for item in investments:
        days = days_between(instant, item.fecha) + 1
        if days <= 0:
            continue
        total += item.monto * (1 + rate) ** days
    return total


def class_end_instant(settings: ClassSettings, timezone_offsets: Optional[Dict[str, int]] = None) -> datetime:
    """
    Last instant of accrual for a class.

    End of the end_date's day, shifted by a fixed hour offset for known
    timezone names. The offset table is an approximation with no DST rules.
    """
    offsets = app_settings.timezone_offsets if timezone_offsets is None else timezone_offsets
    offset_hours = offsets.get(settings.timezone, 0) if settings.timezone else 0
    return end_of_day(settings.end_date, offset_hours)


def has_reached_end_date(
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> bool:
    now = ensure_utc(now) if now else utc_now()
    return now >= class_end_instant(settings, timezone_offsets)


def value_at_class_end(
    investments: List[Investment],
    settings: ClassSettings,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> float:
    """Value frozen at the end of the class"""
    return value_at(class_end_instant(settings, timezone_offsets), investments, effective_monthly_rate(settings))


def current_value(
    investments: List[Investment],
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> float:
    """Value right now, or the frozen end value once the class is over"""
    now = ensure_utc(now) if now else utc_now()
    if has_reached_end_date(settings, now, timezone_offsets):
        return value_at_class_end(investments, settings, timezone_offsets)
    return value_at(now, investments, effective_monthly_rate(settings))


def total_invested(investments: List[Investment]) -> float:
    return sum(item.monto for item in investments)


def total_gain_percent(
    investments: List[Investment],
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> float:
    """Gain over principal in percent (0 when nothing was invested)"""
    principal = total_invested(investments)
    if principal == 0:
        return 0.0

    current = current_value(investments, settings, now, timezone_offsets)
    return (current - principal) / principal * 100


def days_remaining(
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> int:
    """Whole days until the class ends, never negative"""
    now = ensure_utc(now) if now else utc_now()
    return max(0, days_between(class_end_instant(settings, timezone_offsets), now))


def summarize_investment(
    investment: Investment,
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> InvestmentSummary:
    """Project a single investment"""
    now = ensure_utc(now) if now else utc_now()
    value = current_value([investment], settings, now, timezone_offsets)
    gain = value - investment.monto if value > 0 else 0.0

    return InvestmentSummary(
        investment=investment,
        current_value=value,
        gain_amount=gain,
        gain_percentage=gain / investment.monto * 100 if investment.monto else 0.0,
        days_held=max(0, days_between(now, investment.fecha)),
    )


def calculate_stats(
    investments: List[Investment],
    settings: ClassSettings,
    now: Optional[datetime] = None,
    timezone_offsets: Optional[Dict[str, int]] = None,
) -> InvestmentStats:
    """
    Aggregate projection for a student's portfolio.

    Every figure is computed against the same instant so they stay consistent.
    """
    now = ensure_utc(now) if now else utc_now()
    invested = total_invested(investments)
    current = current_value(investments, settings, now, timezone_offsets)

    return InvestmentStats(
        total_invested=invested,
        current_amount=current,
        total_gain=current - invested,
        gain_percentage=(current - invested) / invested * 100 if invested else 0.0,
        days_remaining=days_remaining(settings, now, timezone_offsets),
    )


def class_progress_percent(settings: ClassSettings, now: Optional[datetime] = None) -> float:
    """Elapsed share of the class period, clamped to 0-100"""
    now = ensure_utc(now) if now else utc_now()
    start = ensure_utc(settings.start_date) if settings.start_date else school_year_start(now)
    end = ensure_utc(settings.end_date)

    total_days = days_between(end, start)
    if total_days <= 0:
        return 100.0 if now >= end else 0.0

    elapsed_days = days_between(now, start)
    return min(max(elapsed_days / total_days * 100, 0.0), 100.0)
