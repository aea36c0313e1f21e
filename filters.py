# filters.py
#
# Typed query filters. Each one renders to SQLAlchemy clauses for SqlStore and
# to a row predicate for MemoryStore, so both adapters answer the same query.
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from sqlalchemy import and_, or_


@dataclass(frozen=True)
class DateRange:
  start: Optional[str] = None  # inclusive, YYYY-MM-DD
  end: Optional[str] = None    # inclusive, YYYY-MM-DD

  def clauses(self, column) -> list:
    out = []
    if self.start:
      out.append(column >= self.start)
    if self.end:
      out.append(column <= self.end)
    return out

  def contains(self, value: str) -> bool:
    if self.start and value < self.start:
      return False
    if self.end and value > self.end:
      return False
    return True


class Filter:
  def clauses(self, model) -> list:
    raise NotImplementedError

  def matches(self, row: Any) -> bool:
    raise NotImplementedError


@dataclass(frozen=True)
class CustomerFilter(Filter):
  category: Optional[str] = None
  active: Optional[bool] = None

  def clauses(self, model) -> list:
    out = []
    if self.category is not None:
      out.append(model.category == self.category)
    if self.active is not None:
      out.append(model.is_active == self.active)
    return out

  def matches(self, row) -> bool:
    if self.category is not None and row.category != self.category:
      return False
    if self.active is not None and row.is_active != self.active:
      return False
    return True


@dataclass(frozen=True)
class DeliveryFilter(Filter):
  customer_id: Optional[str] = None
  date: Optional[str] = None
  dates: Optional[Tuple[str, ...]] = None
  date_range: Optional[DateRange] = None
  shift: Optional[str] = None
  delivered: Optional[bool] = None

  def clauses(self, model) -> list:
    out = []
    if self.customer_id is not None:
      out.append(model.customer_id == self.customer_id)
    if self.date is not None:
      out.append(model.date == self.date)
    if self.dates is not None:
      out.append(model.date.in_(self.dates))
    if self.date_range is not None:
      out.extend(self.date_range.clauses(model.date))
    if self.shift is not None:
      out.append(model.shift == self.shift)
    if self.delivered is not None:
      out.append(model.delivered == self.delivered)
    return out

  def matches(self, row) -> bool:
    if self.customer_id is not None and row.customer_id != self.customer_id:
      return False
    if self.date is not None and row.date != self.date:
      return False
    if self.dates is not None and row.date not in self.dates:
      return False
    if self.date_range is not None and not self.date_range.contains(row.date):
      return False
    if self.shift is not None and row.shift != self.shift:
      return False
    if self.delivered is not None and row.delivered != self.delivered:
      return False
    return True


@dataclass(frozen=True)
class StockFilter(Filter):
  date_range: Optional[DateRange] = None

  def clauses(self, model) -> list:
    return self.date_range.clauses(model.date) if self.date_range else []

  def matches(self, row) -> bool:
    return self.date_range.contains(row.date) if self.date_range else True


@dataclass(frozen=True)
class SourceFilter(Filter):
  name: Optional[str] = None
  active: Optional[bool] = None

  def clauses(self, model) -> list:
    out = []
    if self.name is not None:
      out.append(model.name == self.name)
    if self.active is not None:
      out.append(model.is_active == self.active)
    return out

  def matches(self, row) -> bool:
    if self.name is not None and row.name != self.name:
      return False
    if self.active is not None and row.is_active != self.active:
      return False
    return True


@dataclass(frozen=True)
class PaymentFilter(Filter):
  customer_id: Optional[str] = None
  month: Optional[int] = None
  year: Optional[int] = None
  before: Optional[Tuple[int, int]] = None  # (year, month), exclusive

  def clauses(self, model) -> list:
    out = []
    if self.customer_id is not None:
      out.append(model.customer_id == self.customer_id)
    if self.month is not None:
      out.append(model.month == self.month)
    if self.year is not None:
      out.append(model.year == self.year)
    if self.before is not None:
      y, m = self.before
      out.append(or_(model.year < y, and_(model.year == y, model.month < m)))
    return out

  def matches(self, row) -> bool:
    if self.customer_id is not None and row.customer_id != self.customer_id:
      return False
    if self.month is not None and row.month != self.month:
      return False
    if self.year is not None and row.year != self.year:
      return False
    if self.before is not None and (row.year, row.month) >= self.before:
      return False
    return True


# (field name, descending)
OrderBy = Sequence[Tuple[str, bool]]


def asc(name: str) -> Tuple[str, bool]:
  return (name, False)


def desc(name: str) -> Tuple[str, bool]:
  return (name, True)
