# test_stock.py
import pytest

import stock
from errors import ConflictError, NotFoundError, ValidationError


def test_record_resolves_name_or_id(store):
  src = stock.create_source(store, " Farm A ", "farm")

  by_name = stock.record(store, "2025-03-01", "morning", "Farm A", 10)
  by_id = stock.record(store, "2025-03-01", "evening", src.id, 5)

  assert src.name == "Farm A"
  assert by_name.source_name == "Farm A"
  assert by_id.source == src.id
  assert by_id.source_name == "Farm A"


def test_record_rejects_unknown_source(store):
  with pytest.raises(ValidationError):
    stock.record(store, "2025-03-01", "morning", "nowhere", 10)


def test_list_newest_first_with_range(store):
  stock.create_source(store, "Farm A", "farm")
  for day in ["2025-03-01", "2025-03-03", "2025-03-02", "2025-02-27"]:
    stock.record(store, day, "morning", "Farm A", 1)

  rows = stock.list_stock(store, start="2025-03-01", end="2025-03-31")

  assert [r.date for r in rows] == ["2025-03-03", "2025-03-02", "2025-03-01"]
  assert len(stock.list_stock(store, limit=2)) == 2


def test_remove(store):
  stock.create_source(store, "Farm A", "farm")
  row = stock.record(store, "2025-03-01", "morning", "Farm A", 1)

  stock.remove(store, row.id)

  assert stock.list_stock(store) == []
  with pytest.raises(NotFoundError):
    stock.remove(store, row.id)


def test_concurrent_duplicate_name_is_a_conflict(store, monkeypatch):
  stock.create_source(store, "Farm A", "farm")
  real_check = stock._check_name_free
  calls = []

  # the first check runs before the other writer commits, so it sees no clash
  def late_check(*args, **kwargs):
    calls.append(args)
    if len(calls) > 1:
      real_check(*args, **kwargs)

  monkeypatch.setattr(stock, "_check_name_free", late_check)

  with pytest.raises(ConflictError):
    stock.create_source(store, "Farm A", "vendor")

  assert [s.type for s in stock.list_sources(store)] == ["farm"]


def test_source_names_are_unique(store):
  a = stock.create_source(store, "Farm A", "farm")
  b = stock.create_source(store, "Vendor B", "vendor")

  with pytest.raises(ConflictError):
    stock.create_source(store, "Farm A", "vendor")
  with pytest.raises(ConflictError):
    stock.update_source(store, b.id, {"name": "Farm A"})

  # renaming to its own name is fine
  assert stock.update_source(store, a.id, {"name": "Farm A", "type": "dairy"}).type == "dairy"


@pytest.mark.parametrize("name,type", [("", "farm"), ("Farm", None), ("  ", "farm")])
def test_source_requires_name_and_type(store, name, type):
  with pytest.raises(ValidationError):
    stock.create_source(store, name, type)


def test_list_active_sources(store):
  stock.create_source(store, "B", "farm")
  a = stock.create_source(store, "A", "farm")
  off = stock.create_source(store, "C", "farm")
  stock.update_source(store, off.id, {"is_active": False})

  assert [s.name for s in stock.list_sources(store, active=True)] == ["A", "B"]
  assert len(stock.list_sources(store)) == 3

  stock.delete_source(store, a.id)
  with pytest.raises(NotFoundError):
    stock.delete_source(store, a.id)
