# billing.py
#
# Monthly rollup: delivered liters per customer, bucketed per day into
# morning/evening, priced at the customer's current price per liter.
# Historical price changes are not tracked, so a mid-month price change
# reprices the whole month.
import logging
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

import clock
from errors import ValidationError
from filters import CustomerFilter, DateRange, DeliveryFilter, PaymentFilter, asc
from ledger import get_customer
from models import Customer, Delivery, Payment, Shift
from schemas import (
  BillingSummary, CustomerBilling, DailyBreakdown, InvoiceCustomer, InvoiceDay,
  InvoiceOut, SettingsOut, TodayRevenue,
)
from store import Store

logger = logging.getLogger(__name__)


def check_period(month: Optional[int], year: Optional[int]) -> Tuple[int, int]:
  if month is None or year is None or not 1 <= month <= 12 or not 1900 <= year <= 9999:
    raise ValidationError("Month and year are required")
  return month, year


def _bucket(rows: List[Delivery]) -> Tuple[float, List[Tuple[str, float, float]]]:
  total = 0.0
  days: Dict[str, List[float]] = {}
  for d in rows:
    amount = d.actual_amount or 0
    total += amount
    bucket = days.setdefault(d.date, [0.0, 0.0])
    if d.shift == Shift.MORNING.value:
      bucket[0] += amount
    else:
      bucket[1] += amount
  return total, [(day, m, e) for day, (m, e) in sorted(days.items())]


def _month_rows(store: Store, customer_id: str, month: int, year: int) -> List[Delivery]:
  start, end = clock.month_range(month, year)
  return store.find_many(
    Delivery,
    DeliveryFilter(customer_id=customer_id, date_range=DateRange(start, end), delivered=True),
  )


def _previous_balance(store: Store, customer: Customer, month: int, year: int) -> float:
  start, _ = clock.month_range(month, year)
  day_before = clock.fmt(clock.parse(start) - timedelta(days=1))
  liters = store.total(
    Delivery,
    "actual_amount",
    DeliveryFilter(customer_id=customer.id, date_range=DateRange(end=day_before), delivered=True),
  )
  paid = store.total(Payment, "amount", PaymentFilter(customer_id=customer.id, before=(year, month)))
  return liters * customer.price_per_liter - paid


def summarize(store: Store, customer: Customer, month: int, year: int) -> BillingSummary:
  total_liters, days = _bucket(_month_rows(store, customer.id, month, year))
  total_amount = total_liters * customer.price_per_liter
  previous = _previous_balance(store, customer, month, year)
  paid = store.total(Payment, "amount", PaymentFilter(customer_id=customer.id, month=month, year=year))
  return BillingSummary(
    customer_id=customer.id,
    customer_name=customer.name,
    customer_address=customer.address,
    month=month,
    year=year,
    total_liters=total_liters,
    price_per_liter=customer.price_per_liter,
    total_amount=total_amount,
    previous_balance=previous,
    paid_amount=paid,
    total_due=total_amount + previous - paid,
    daily_breakdown=[
      DailyBreakdown(date=day, morning_amount=m, evening_amount=e, total_amount=m + e)
      for day, m, e in days
    ],
  )


def monthly(store: Store, month: int, year: int) -> List[BillingSummary]:
  customers = store.find_many(Customer, CustomerFilter(active=True), order_by=[asc("name")])
  return [summarize(store, c, month, year) for c in customers]


def customer_billing(store: Store, customer_id: str, month: int, year: int,
                     settings: Optional[SettingsOut] = None) -> CustomerBilling:
  customer = get_customer(store, customer_id)
  summary = summarize(store, customer, month, year)
  return CustomerBilling(**summary.model_dump(), settings=settings)


def customer_invoice(store: Store, customer_id: str, month: int, year: int) -> InvoiceOut:
  customer = get_customer(store, customer_id)
  total_liters, days = _bucket(_month_rows(store, customer.id, month, year))
  return InvoiceOut(
    customer=InvoiceCustomer.model_validate(customer),
    month=month,
    year=year,
    total_liters=total_liters,
    total_amount=total_liters * customer.price_per_liter,
    daily_breakdown=[InvoiceDay(date=day, morning=m, evening=e) for day, m, e in days],
  )


def revenue_for(store: Store, day: str) -> float:
  per_customer: Dict[str, float] = {}
  for d in store.find_many(Delivery, DeliveryFilter(date=day, delivered=True)):
    per_customer[d.customer_id] = per_customer.get(d.customer_id, 0) + (d.actual_amount or 0)

  revenue = 0.0
  for customer_id, liters in per_customer.items():
    customer = store.get(Customer, customer_id)
    if customer is not None:
      revenue += liters * customer.price_per_liter
  return revenue


def today_revenue(store: Store, day: str) -> TodayRevenue:
  return TodayRevenue(revenue=revenue_for(store, day), date=day)


def record_payment(store: Store, customer_id: str, amount: float, day: str,
                   month: int, year: int, remarks: Optional[str] = None) -> Payment:
  customer = get_customer(store, customer_id)
  payment = Payment(
    customer_id=customer.id, amount=amount, date=day, month=month, year=year, remarks=remarks,
  )
  with store.transaction():
    store.add(payment)
  logger.info("payment %.2f from %s for %02d/%d", amount, customer.name, month, year)
  return payment
