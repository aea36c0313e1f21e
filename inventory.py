# inventory.py
#
# Running stock balance: everything ever collected minus everything ever
# delivered. Not windowed.
from typing import List

from filters import DateRange, DeliveryFilter, StockFilter
from models import Delivery, Stock
from schemas import InventoryOut, SourceShare
from store import Store

DEFAULT_CAPACITY = 2000
LOW_STOCK_PERCENT = 20


def current_inventory(store: Store, max_capacity: float) -> InventoryOut:
  max_capacity = max_capacity or DEFAULT_CAPACITY
  stock_in = store.total(Stock, "quantity")
  delivered = store.total(Delivery, "actual_amount", DeliveryFilter(delivered=True))
  balance = max(0.0, stock_in - delivered)
  percentage = max(0.0, min(balance / max_capacity * 100, 100.0))
  return InventoryOut(
    current_inventory=balance,
    max_capacity=max_capacity,
    percentage=percentage,
    low_stock=percentage < LOW_STOCK_PERCENT,
  )


def source_totals(store: Store, start: str, end: str) -> List[SourceShare]:
  totals = {}
  for row in store.find_many(Stock, StockFilter(date_range=DateRange(start, end))):
    name = row.source_name or "Unknown"
    totals[name] = totals.get(name, 0) + (row.quantity or 0)
  return [SourceShare(name=name, value=value) for name, value in sorted(totals.items())]
