# stock.py
import logging
from typing import List, Optional

from errors import ConflictError, NotFoundError, StoreError, ValidationError
from filters import DateRange, SourceFilter, StockFilter, asc, desc
from models import Shift, Source, Stock
from store import Store

logger = logging.getLogger(__name__)


def list_stock(store: Store, start: Optional[str] = None, end: Optional[str] = None,
               limit: int = 50) -> List[Stock]:
  return store.find_many(
    Stock,
    StockFilter(date_range=DateRange(start, end)),
    order_by=[desc("date"), desc("created_at")],
    limit=limit,
  )


def recent(store: Store, limit: int = 10) -> List[Stock]:
  return store.find_many(Stock, order_by=[desc("created_at")], limit=limit)


def resolve_source(store: Store, ref: str) -> Source:
  # by name first, then by id
  source = store.find_one(Source, SourceFilter(name=ref)) or store.get(Source, ref)
  if source is None:
    raise ValidationError("Invalid source. Please select a valid source.")
  return source


def record(store: Store, day: str, shift: Shift, source_ref: str, quantity: float) -> Stock:
  source = resolve_source(store, source_ref)
  row = Stock(
    date=day,
    shift=Shift(shift).value,
    source=source_ref,
    source_name=source.name,
    quantity=quantity,
  )
  with store.transaction():
    store.add(row)
  logger.info("stock in %s %s: %s L from %s", day, row.shift, quantity, source.name)
  return row


def remove(store: Store, stock_id: str) -> None:
  row = store.get(Stock, stock_id)
  if row is None:
    raise NotFoundError("Stock record not found")
  with store.transaction():
    store.delete(row)


# ---------- sources ----------

def list_sources(store: Store, active: Optional[bool] = None) -> List[Source]:
  return store.find_many(Source, SourceFilter(active=active), order_by=[asc("name")])


def _check_name_free(store: Store, name: str, own_id: Optional[str] = None) -> None:
  clash = store.find_one(Source, SourceFilter(name=name))
  if clash is not None and clash.id != own_id:
    raise ConflictError("Source name already exists")


def _write(store: Store, source: Source, op) -> None:
  # a concurrent writer can take the name between the check and the write
  name, own_id = source.name, source.id
  try:
    with store.transaction():
      op(source)
  except StoreError:
    _check_name_free(store, name, own_id=own_id)
    raise


def create_source(store: Store, name: Optional[str], type: Optional[str]) -> Source:
  name, type = (name or "").strip(), (type or "").strip()
  if not name or not type:
    raise ValidationError("Name and type are required")
  _check_name_free(store, name)
  source = Source(name=name, type=type, is_active=True)
  _write(store, source, store.add)
  return source


def update_source(store: Store, source_id: str, changes: dict) -> Source:
  source = store.get(Source, source_id)
  if source is None:
    raise NotFoundError("Source not found")
  if changes.get("name"):
    changes["name"] = changes["name"].strip()
    _check_name_free(store, changes["name"], own_id=source.id)
  for k, v in changes.items():
    setattr(source, k, v)
  _write(store, source, store.save)
  return source


def delete_source(store: Store, source_id: str) -> None:
  source = store.get(Source, source_id)
  if source is None:
    raise NotFoundError("Source not found")
  with store.transaction():
    store.delete(source)
