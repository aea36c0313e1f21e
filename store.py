# store.py
#
# Storage interface used by the ledger and the aggregators, plus the SQLModel
# adapter. The document-style adapter lives in memory_store.py.
import functools
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, select

from errors import StoreError
from filters import Filter, OrderBy
from models import utcnow

T = TypeVar("T", bound=SQLModel)


class Store(ABC):
  @abstractmethod
  def get(self, model: Type[T], id: Any) -> Optional[T]: ...

  @abstractmethod
  def find_many(
    self,
    model: Type[T],
    flt: Optional[Filter] = None,
    order_by: OrderBy = (),
    limit: Optional[int] = None,
  ) -> List[T]: ...

  def find_one(self, model: Type[T], flt: Filter) -> Optional[T]:
    rows = self.find_many(model, flt, limit=1)
    return rows[0] if rows else None

  @abstractmethod
  def count(self, model: Type[T], flt: Optional[Filter] = None) -> int: ...

  @abstractmethod
  def total(self, model: Type[T], field: str, flt: Optional[Filter] = None) -> float: ...

  @abstractmethod
  def add(self, obj: T) -> T: ...

  @abstractmethod
  def save(self, obj: T) -> T: ...

  @abstractmethod
  def delete(self, obj: SQLModel) -> None: ...

  @abstractmethod
  def update_many(self, model: Type[T], flt: Filter, values: Dict[str, Any]) -> int: ...

  @abstractmethod
  def upsert(
    self,
    model: Type[T],
    key: Dict[str, Any],
    create: Dict[str, Any],
    update: Dict[str, Any],
  ) -> T:
    """Insert `key + create`, or apply `update` to the row matching `key`.

    `key` must name the fields of a unique constraint on `model`.
    """

  @abstractmethod
  def transaction(self) -> Iterator[None]:
    """All-or-nothing block. Nested blocks join the outermost one."""


def _wrap_errors(fn):
  @functools.wraps(fn)
  def wrapper(*args, **kwargs):
    try:
      return fn(*args, **kwargs)
    except SQLAlchemyError as e:
      raise StoreError(f"{fn.__name__} failed: {e}") from e
  return wrapper


def stamp_updated(model: Type[SQLModel], values: Dict[str, Any]) -> Dict[str, Any]:
  if "updated_at" in model.model_fields and "updated_at" not in values:
    return {**values, "updated_at": utcnow()}
  return values


class SqlStore(Store):
  def __init__(self, session: Session):
    self.session = session
    self._depth = 0

  def _where(self, model, flt: Optional[Filter]) -> list:
    return flt.clauses(model) if flt is not None else []

  @_wrap_errors
  def get(self, model, id):
    return self.session.get(model, id)

  @_wrap_errors
  def find_many(self, model, flt=None, order_by=(), limit=None):
    stmt = select(model).where(*self._where(model, flt))
    for name, descending in order_by:
      col = getattr(model, name)
      stmt = stmt.order_by(col.desc() if descending else col.asc())
    if limit is not None:
      stmt = stmt.limit(limit)
    return list(self.session.exec(stmt).all())

  @_wrap_errors
  def count(self, model, flt=None):
    stmt = select(func.count()).select_from(model).where(*self._where(model, flt))
    return int(self.session.exec(stmt).one())

  @_wrap_errors
  def total(self, model, field, flt=None):
    col = getattr(model, field)
    stmt = select(func.coalesce(func.sum(col), 0)).where(*self._where(model, flt))
    return float(self.session.exec(stmt).one() or 0)

  @_wrap_errors
  def add(self, obj):
    self.session.add(obj)
    self.session.flush()
    return obj

  @_wrap_errors
  def save(self, obj):
    if "updated_at" in type(obj).model_fields:
      obj.updated_at = utcnow()
    self.session.add(obj)
    self.session.flush()
    return obj

  @_wrap_errors
  def delete(self, obj):
    self.session.delete(obj)
    self.session.flush()

  @_wrap_errors
  def update_many(self, model, flt, values):
    self.session.flush()
    stmt = update(model).where(*self._where(model, flt)).values(**stamp_updated(model, values))
    result = self.session.connection().execute(stmt)
    self.session.expire_all()
    return result.rowcount

  @_wrap_errors
  def upsert(self, model, key, create, update):
    update = stamp_updated(model, update)
    dialect = self.session.get_bind().dialect.name
    if dialect in ("sqlite", "postgresql"):
      insert = sqlite_insert if dialect == "sqlite" else pg_insert
      row = model(**key, **create).model_dump()
      stmt = insert(model).values(**row).on_conflict_do_update(
        index_elements=list(key), set_=update
      )
      self.session.flush()
      self.session.connection().execute(stmt)
      stmt = select(model).execution_options(populate_existing=True)
      for name, value in key.items():
        stmt = stmt.where(getattr(model, name) == value)
      return self.session.exec(stmt).one()

    stmt = select(model)
    for name, value in key.items():
      stmt = stmt.where(getattr(model, name) == value)
    existing = self.session.exec(stmt).first()
    if existing is None:
      existing = model(**key, **create)
    else:
      for name, value in update.items():
        setattr(existing, name, value)
    self.session.add(existing)
    self.session.flush()
    return existing

  @contextmanager
  def transaction(self):
    self._depth += 1
    try:
      yield
      if self._depth == 1:
        self.session.commit()
    except SQLAlchemyError as e:
      if self._depth == 1:
        self.session.rollback()
      raise StoreError(f"transaction failed: {e}") from e
    except BaseException:
      if self._depth == 1:
        self.session.rollback()
      raise
    finally:
      self._depth -= 1
