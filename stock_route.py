# stock_route.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

import inventory
import stock
from business_settings import SettingsCache, get_settings
from db import get_store
from errors import fails_with
from schemas import (
  ApiResponse, DateStr, InventoryOut, SourceCreate, SourceOption, SourceOut,
  SourceUpdate, StockCreate, StockOut, ok,
)
from store import Store

router = APIRouter(prefix="/stock", tags=["stock"])
sources_router = APIRouter(prefix="/sources", tags=["sources"])


@router.get("", response_model=ApiResponse[List[StockOut]])
@fails_with("Failed to fetch stock records")
def list_stock(
  start_date: Optional[DateStr] = Query(None, alias="startDate"),
  end_date: Optional[DateStr] = Query(None, alias="endDate"),
  limit: int = Query(50, ge=1, le=1000),
  store: Store = Depends(get_store),
):
  rows = stock.list_stock(store, start_date, end_date, limit)
  return ok([StockOut.model_validate(r) for r in rows])


@router.get("/recent", response_model=ApiResponse[List[StockOut]])
@fails_with("Failed to fetch recent collections")
def recent_collections(limit: int = Query(10, ge=1, le=1000), store: Store = Depends(get_store)):
  return ok([StockOut.model_validate(r) for r in stock.recent(store, limit)])


@router.get("/inventory", response_model=ApiResponse[InventoryOut])
@fails_with("Failed to calculate inventory")
def current_inventory(store: Store = Depends(get_store), settings: SettingsCache = Depends(get_settings)):
  return ok(inventory.current_inventory(store, settings.current.max_capacity))


@router.get("/sources", response_model=ApiResponse[List[SourceOption]])
@fails_with("Failed to fetch stock sources")
def stock_sources(store: Store = Depends(get_store)):
  rows = stock.list_sources(store, active=True)
  return ok([SourceOption(value=s.name, label=s.name, type=s.type) for s in rows])


@router.post("", response_model=ApiResponse[StockOut], status_code=201)
@fails_with("Failed to create stock record")
def create_stock(payload: StockCreate, store: Store = Depends(get_store)):
  row = stock.record(store, payload.date, payload.shift, payload.source, payload.quantity)
  return ok(StockOut.model_validate(row), "Stock record created successfully")


@router.delete("/{stock_id}", response_model=ApiResponse[None])
@fails_with("Failed to delete stock record")
def delete_stock(stock_id: str, store: Store = Depends(get_store)):
  stock.remove(store, stock_id)
  return ok(message="Stock record deleted successfully")


# ---------- sources ----------

@sources_router.get("", response_model=ApiResponse[List[SourceOut]])
@fails_with("Failed to fetch sources")
def list_sources(store: Store = Depends(get_store)):
  return ok([SourceOut.model_validate(s) for s in stock.list_sources(store)])


@sources_router.post("", response_model=ApiResponse[SourceOut], status_code=201)
@fails_with("Failed to create source")
def create_source(payload: SourceCreate, store: Store = Depends(get_store)):
  source = stock.create_source(store, payload.name, payload.type)
  return ok(SourceOut.model_validate(source), "Source created successfully")


@sources_router.put("/{source_id}", response_model=ApiResponse[SourceOut])
@fails_with("Failed to update source")
def update_source(source_id: str, payload: SourceUpdate, store: Store = Depends(get_store)):
  changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
  source = stock.update_source(store, source_id, changes)
  return ok(SourceOut.model_validate(source), "Source updated successfully")


@sources_router.delete("/{source_id}", response_model=ApiResponse[None])
@fails_with("Failed to delete source")
def delete_source(source_id: str, store: Store = Depends(get_store)):
  stock.delete_source(store, source_id)
  return ok(message="Source deleted successfully")
