# dashboard.py
import math
from datetime import date, datetime, timedelta
from typing import List, Optional

import billing
import clock
import inventory
import ledger
from filters import CustomerFilter, DateRange, DeliveryFilter, asc
from models import Customer, Delivery
from schemas import Comparison, DashboardStats, TrendPoint, WeeklyPoint
from store import Store


def pending_count(store: Store, day: str, shift: str) -> int:
  """Active customers with a quota this shift and no delivered row for it yet."""
  served = {
    d.customer_id
    for d in store.find_many(Delivery, DeliveryFilter(date=day, shift=shift, delivered=True))
  }
  return sum(
    1
    for c in store.find_many(Customer, CustomerFilter(active=True))
    if c.quota_for(shift) > 0 and c.id not in served
  )


def weekly_overview(store: Store, day: date) -> List[WeeklyPoint]:
  dates = clock.week_dates(day)
  totals = dict.fromkeys(dates, 0.0)
  for d in store.find_many(Delivery, DeliveryFilter(dates=tuple(dates), delivered=True)):
    totals[d.date] += d.actual_amount or 0
  return [WeeklyPoint(day=name, amount=totals[d]) for name, d in zip(clock.DAY_NAMES, dates)]


def stats(store: Store, at: datetime, max_capacity: float) -> DashboardStats:
  today = clock.fmt(at.date())
  shift = clock.current_shift(at).value
  stock = inventory.current_inventory(store, max_capacity)
  return DashboardStats(
    total_milk_today=ledger.day_total(store, today),
    estimated_revenue_today=billing.revenue_for(store, today),
    active_customers=store.count(Customer, CustomerFilter(active=True)),
    current_stock=stock.current_inventory,
    max_capacity=stock.max_capacity,
    stock_percentage=stock.percentage,
    low_stock_alert=stock.low_stock,
    pending_deliveries=pending_count(store, today, shift),
    weekly_overview=weekly_overview(store, at.date()),
  )


def percentage_change(today: float, yesterday: float) -> int:
  if yesterday <= 0:
    return 0
  # .5 rounds up, not to even
  change = (today - yesterday) / yesterday * 100
  return int(math.floor(change + 0.5))


def comparison(store: Store, day: date) -> Comparison:
  today_total = ledger.day_total(store, clock.fmt(day))
  yesterday_total = ledger.day_total(store, clock.fmt(day - timedelta(days=1)))
  return Comparison(
    today=today_total,
    yesterday=yesterday_total,
    percentage_change=percentage_change(today_total, yesterday_total),
  )


def trends(store: Store, start: str, end: str, customer_id: Optional[str] = None) -> List[TrendPoint]:
  if customer_id == "all":
    customer_id = None
  totals = {}
  rows = store.find_many(
    Delivery,
    DeliveryFilter(customer_id=customer_id, date_range=DateRange(start, end), delivered=True),
    order_by=[asc("date")],
  )
  for d in rows:
    totals[d.date] = totals.get(d.date, 0) + (d.actual_amount or 0)
  return [TrendPoint(date=k, amount=v) for k, v in totals.items()]
