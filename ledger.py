# ledger.py
#
# Delivery ledger: one row per (customer, date, shift), written through
# Store.upsert so the key stays unique even under concurrent writers.
import logging
from typing import List, Optional

from errors import NotFoundError
from filters import CustomerFilter, DateRange, DeliveryFilter, asc, desc
from models import Customer, Delivery, Shift
from schemas import BulkEntry, BulkResult, DeliveryOut
from store import Store

logger = logging.getLogger(__name__)


def _out(row: Delivery, customer_name: str) -> DeliveryOut:
  return DeliveryOut.model_validate({**row.model_dump(), "customer_name": customer_name})


def _key(customer_id: str, day: str, shift: str) -> dict:
  return {"customer_id": customer_id, "date": day, "shift": shift}


def get_customer(store: Store, customer_id: str) -> Customer:
  customer = store.get(Customer, customer_id)
  if customer is None:
    raise NotFoundError("Customer not found")
  return customer


def _record(store: Store, customer: Customer, day: str, shift: str,
            actual_amount: float, delivered: bool, notes: Optional[str]) -> Delivery:
  return store.upsert(
    Delivery,
    key=_key(customer.id, day, shift),
    create={
      "quota": customer.quota_for(shift),
      "actual_amount": actual_amount,
      "delivered": delivered,
      "notes": notes,
    },
    update={"actual_amount": actual_amount, "delivered": delivered, "notes": notes or ""},
  )


def list_for_date_shift(store: Store, day: str, shift: Shift) -> List[DeliveryOut]:
  """Every active customer for the day/shift, with a zero placeholder where no row exists."""
  shift = Shift(shift).value
  customers = store.find_many(Customer, CustomerFilter(active=True), order_by=[asc("name")])
  existing = {d.customer_id: d for d in store.find_many(Delivery, DeliveryFilter(date=day, shift=shift))}

  out = []
  for c in customers:
    row = existing.get(c.id)
    if row is not None:
      out.append(_out(row, c.name))
      continue
    out.append(DeliveryOut(
      customer_id=c.id,
      customer_name=c.name,
      date=day,
      shift=shift,
      quota=c.quota_for(shift),
      actual_amount=0,
      delivered=False,
    ))
  return out


def upsert(store: Store, customer_id: str, day: str, shift: Shift,
           actual_amount: float, delivered: bool, notes: Optional[str] = None) -> DeliveryOut:
  shift = Shift(shift).value
  customer = get_customer(store, customer_id)
  with store.transaction():
    row = _record(store, customer, day, shift, actual_amount, delivered, notes)
  return _out(row, customer.name)


def bulk_update(store: Store, day: str, shift: Shift, entries: List[BulkEntry]) -> BulkResult:
  # unknown customers are skipped, not fatal; their ids come back in `skipped`
  shift = Shift(shift).value
  updated, skipped = 0, []
  with store.transaction():
    for entry in entries:
      customer = store.get(Customer, entry.customer_id)
      if customer is None:
        skipped.append(entry.customer_id)
        continue
      _record(store, customer, day, shift, entry.actual_amount, entry.delivered, entry.notes)
      updated += 1
  logger.info("bulk update %s %s: %d updated, %d skipped", day, shift, updated, len(skipped))
  return BulkResult(updated=updated, skipped=skipped)


def autofill(store: Store, day: str, shift: Shift) -> int:
  shift = Shift(shift).value
  count = 0
  with store.transaction():
    for customer in store.find_many(Customer, CustomerFilter(active=True)):
      quota = customer.quota_for(shift)
      if quota <= 0:
        continue
      store.upsert(
        Delivery,
        key=_key(customer.id, day, shift),
        create={"quota": quota, "actual_amount": quota, "delivered": True},
        update={"actual_amount": quota, "delivered": True},
      )
      count += 1
  logger.info("autofill %s %s: %d deliveries", day, shift, count)
  return count


def clear(store: Store, day: str, shift: Shift) -> int:
  """Zero every row of the day/shift. Rows are kept."""
  shift = Shift(shift).value
  with store.transaction():
    count = store.update_many(
      Delivery, DeliveryFilter(date=day, shift=shift), {"actual_amount": 0, "delivered": False}
    )
  logger.info("cleared %s %s: %d deliveries", day, shift, count)
  return count


def day_total(store: Store, day: str) -> float:
  return store.total(Delivery, "actual_amount", DeliveryFilter(date=day, delivered=True))


def history(store: Store, customer_id: str, start: Optional[str] = None,
            end: Optional[str] = None) -> List[DeliveryOut]:
  customer = get_customer(store, customer_id)
  rows = store.find_many(
    Delivery,
    DeliveryFilter(customer_id=customer.id, date_range=DateRange(start, end)),
    order_by=[desc("date"), desc("shift")],  # "morning" sorts after "evening"
  )
  return [_out(r, customer.name) for r in rows]
