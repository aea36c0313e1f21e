# db.py
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlmodel import SQLModel, create_engine, Session

import config
from memory_store import MemoryStore
from store import SqlStore, Store


def make_engine(url: str = config.DATABASE_URL, **kwargs):
  if url.startswith("sqlite"):
    kwargs.setdefault("connect_args", {"check_same_thread": False})
  return create_engine(url, echo=config.SQL_ECHO, pool_pre_ping=True, **kwargs)


engine = make_engine()


class SqlStores:
  name = "sql"

  def __init__(self, bind=None):
    self.bind = bind if bind is not None else engine

  def init(self) -> None:
    SQLModel.metadata.create_all(self.bind)

  @contextmanager
  def open(self) -> Iterator[Store]:
    with Session(self.bind, expire_on_commit=False) as session:
      yield SqlStore(session)


class MemoryStores:
  name = "memory"

  def __init__(self, store: Optional[MemoryStore] = None):
    self.store = store if store is not None else MemoryStore()

  def init(self) -> None:
    pass

  @contextmanager
  def open(self) -> Iterator[Store]:
    yield self.store


def default_stores():
  return MemoryStores() if config.STORE_BACKEND == "memory" else SqlStores()


def get_store(request: Request):
  with request.app.state.stores.open() as store:
    yield store
