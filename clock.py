# clock.py
#
# Calendar helpers. Dates travel as YYYY-MM-DD strings everywhere, so range
# filters are plain string comparisons.
import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from models import Shift

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def now() -> datetime:
  return datetime.now()


def fmt(d: date) -> str:
  return d.strftime("%Y-%m-%d")


def parse(value: str) -> date:
  return datetime.strptime(value, "%Y-%m-%d").date()


def current_shift(at: datetime) -> Shift:
  return Shift.MORNING if at.hour < 12 else Shift.EVENING


def month_range(month: int, year: int) -> Tuple[str, str]:
  last_day = calendar.monthrange(year, month)[1]
  return fmt(date(year, month, 1)), fmt(date(year, month, last_day))


def week_dates(day: date) -> List[str]:
  """Monday..Sunday of the week containing `day`."""
  monday = day - timedelta(days=day.weekday())
  return [fmt(monday + timedelta(days=i)) for i in range(7)]


def window(start: Optional[str], end: Optional[str], today: date, days: int = 30) -> Tuple[str, str]:
  end_day = parse(end) if end else today
  start_day = parse(start) if start else end_day - timedelta(days=days)
  return fmt(start_day), fmt(end_day)
