# conftest.py
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

import clock
import customers
from db import MemoryStores, SqlStores, make_engine
from main import create_app

# a Wednesday, before noon
FIXED_NOW = datetime(2025, 3, 12, 9, 30)


def build_stores(kind: str):
  if kind == "sql":
    return SqlStores(make_engine("sqlite://", poolclass=StaticPool))
  return MemoryStores()


@pytest.fixture(params=["sql", "memory"])
def stores(request):
  s = build_stores(request.param)
  s.init()
  return s


@pytest.fixture
def store(stores):
  with stores.open() as s:
    yield s


@pytest.fixture
def app(stores):
  app = create_app(stores)
  app.dependency_overrides[clock.now] = lambda: FIXED_NOW
  return app


@pytest.fixture
def client(app):
  with TestClient(app) as c:
    yield c


@pytest.fixture
def add_customer(store):
  def _add(name="Asha", **fields):
    data = {"name": name, "address": "1 Mill Road", **fields}
    return customers.create(store, data, default_price=2.0)
  return _add
