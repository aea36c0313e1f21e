# memory_store.py
#
# Document-style adapter: each table is a collection of plain dicts keyed by
# id. Rows handed out are detached copies, so writes go through save().
import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

from sqlalchemy import UniqueConstraint

from errors import StoreError
from models import utcnow
from store import Store, stamp_updated


def _collection_name(model) -> str:
  return model.__tablename__


def _unique_keys(model) -> List[Tuple[str, ...]]:
  table = model.__table__
  keys = [(c.name,) for c in table.columns if c.unique]
  for con in table.constraints:
    if isinstance(con, UniqueConstraint):
      keys.append(tuple(c.name for c in con.columns))
  return keys


class MemoryStore(Store):
  def __init__(self):
    self._collections: Dict[str, Dict[Any, dict]] = {}
    self._lock = threading.RLock()
    self._depth = 0
    self._snapshot = None

  def _docs(self, model) -> Dict[Any, dict]:
    return self._collections.setdefault(_collection_name(model), {})

  def _load(self, model, doc: dict):
    return model.model_validate(copy.deepcopy(doc))

  def _rows(self, model, flt=None) -> list:
    rows = [self._load(model, d) for d in self._docs(model).values()]
    return [r for r in rows if flt is None or flt.matches(r)]

  def _check_unique(self, model, doc: dict) -> None:
    for key in _unique_keys(model):
      for other in self._docs(model).values():
        if other["id"] != doc["id"] and all(other[k] == doc[k] for k in key):
          raise StoreError(
            f"unique constraint failed: {_collection_name(model)}({', '.join(key)})"
          )

  def _put(self, obj) -> None:
    model = type(obj)
    doc = obj.model_dump()
    self._check_unique(model, doc)
    self._docs(model)[doc["id"]] = doc

  def get(self, model, id):
    with self._lock:
      doc = self._docs(model).get(id)
      return self._load(model, doc) if doc is not None else None

  def find_many(self, model, flt=None, order_by=(), limit=None):
    with self._lock:
      rows = self._rows(model, flt)
    for name, descending in reversed(list(order_by)):
      rows.sort(key=lambda r: (getattr(r, name) is None, getattr(r, name)), reverse=descending)
    return rows[:limit] if limit is not None else rows

  def count(self, model, flt=None):
    with self._lock:
      return len(self._rows(model, flt))

  def total(self, model, field, flt=None):
    with self._lock:
      return float(sum(getattr(r, field) or 0 for r in self._rows(model, flt)))

  def add(self, obj):
    with self._lock:
      if obj.id in self._docs(type(obj)):
        raise StoreError(f"duplicate id in {_collection_name(type(obj))}: {obj.id}")
      self._put(obj)
      return obj

  def save(self, obj):
    with self._lock:
      if "updated_at" in type(obj).model_fields:
        obj.updated_at = utcnow()
      self._put(obj)
      return obj

  def delete(self, obj):
    with self._lock:
      self._docs(type(obj)).pop(obj.id, None)

  def update_many(self, model, flt, values):
    values = stamp_updated(model, values)
    with self._lock:
      touched = 0
      for doc in self._docs(model).values():
        if flt.matches(self._load(model, doc)):
          doc.update(values)
          touched += 1
      return touched

  def upsert(self, model, key, create, update):
    update = stamp_updated(model, update)
    with self._lock:
      for doc in self._docs(model).values():
        if all(doc[k] == v for k, v in key.items()):
          doc.update(update)
          return self._load(model, doc)
      row = model(**key, **create)
      self._put(row)
      return self._load(model, self._docs(model)[row.id])

  @contextmanager
  def transaction(self):
    with self._lock:
      if self._depth == 0:
        self._snapshot = copy.deepcopy(self._collections)
      self._depth += 1
      try:
        yield
      except BaseException:
        if self._depth == 1:
          self._collections = self._snapshot
        raise
      finally:
        self._depth -= 1
        if self._depth == 0:
          self._snapshot = None
