"""
Donor availability rules.

Pure helpers shared by the donor registry and the eligibility sweep: a donor
is automatically eligible when they never donated, or when the cooldown since
their last donation has elapsed, provided their district is one of the
eligible regions.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

# Constants
DONATION_COOLDOWN_DAYS = 90


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def eligibility_cutoff(today: Optional[date] = None, cooldown_days: int = DONATION_COOLDOWN_DAYS) -> date:
    """Latest donation date that has already served its cooldown on ``today``."""
    today = _as_date(today) or date.today()
    return today - timedelta(days=cooldown_days)


def cooldown_elapsed(last_donation_date, today: Optional[date] = None,
                     cooldown_days: int = DONATION_COOLDOWN_DAYS) -> bool:
    """
    True when no donation is recorded or at least ``cooldown_days`` have
    passed since ``last_donation_date``.
    """
    if not last_donation_date:
        return True
    return _as_date(last_donation_date) <= eligibility_cutoff(today, cooldown_days)


def in_eligible_region(district: Optional[str], eligible_regions: Iterable[str]) -> bool:
    """An empty region set admits every district."""
    regions = {region.strip().lower() for region in eligible_regions if region}
    if not regions:
        return True
    return bool(district) and district.strip().lower() in regions


def compute_auto_availability(district, last_donation_date, eligible_regions=(),
                              today=None, cooldown_days=DONATION_COOLDOWN_DAYS) -> bool:
    """
    Availability a profile gets when nobody has set it explicitly.

    Args:
        district: donor's current district
        last_donation_date: date of the last recorded donation, or None
        eligible_regions: districts that are auto-enabled (empty = all)
        today: reference date, defaults to the current date
        cooldown_days: days a donor must wait between donations

    Returns:
        bool: True if the donor should be marked available
    """
    if not in_eligible_region(district, eligible_regions):
        return False
    return cooldown_elapsed(last_donation_date, today, cooldown_days)


def days_until_eligible(last_donation_date, today=None, cooldown_days=DONATION_COOLDOWN_DAYS) -> int:
    if not last_donation_date:
        return 0
    today = _as_date(today) or date.today()
    days_since = (today - _as_date(last_donation_date)).days
    return max(0, cooldown_days - days_since)
