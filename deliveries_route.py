# deliveries_route.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

import clock
import ledger
from db import get_store
from errors import ValidationError, fails_with
from models import Shift
from schemas import (
  ApiResponse, BulkDeliveryUpdate, BulkResult, CountResult, DateStr, DeliveryOut,
  DeliveryUpsert, ShiftSelection, TodayTotal, ok,
)
from store import Store

router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _require(day: Optional[str], shift: Optional[Shift]):
  if not day or not shift:
    raise ValidationError("Date and shift are required")
  return day, shift


@router.get("", response_model=ApiResponse[List[DeliveryOut]])
@fails_with("Failed to fetch deliveries")
def list_deliveries(
  date: Optional[DateStr] = None,
  shift: Optional[Shift] = None,
  store: Store = Depends(get_store),
):
  day, shift = _require(date, shift)
  return ok(ledger.list_for_date_shift(store, day, shift))


@router.get("/today-total", response_model=ApiResponse[TodayTotal])
@fails_with("Failed to fetch today total")
def today_total(store: Store = Depends(get_store), now: datetime = Depends(clock.now)):
  today = clock.fmt(now.date())
  return ok(TodayTotal(total=ledger.day_total(store, today), date=today))


@router.get("/customer/{customer_id}", response_model=ApiResponse[List[DeliveryOut]])
@fails_with("Failed to fetch customer deliveries")
def customer_history(
  customer_id: str,
  start_date: Optional[DateStr] = Query(None, alias="startDate"),
  end_date: Optional[DateStr] = Query(None, alias="endDate"),
  store: Store = Depends(get_store),
):
  return ok(ledger.history(store, customer_id, start_date, end_date))


@router.post("", response_model=ApiResponse[DeliveryOut])
@fails_with("Failed to save delivery")
def upsert_delivery(payload: DeliveryUpsert, store: Store = Depends(get_store)):
  row = ledger.upsert(
    store, payload.customer_id, payload.date, payload.shift,
    payload.actual_amount, payload.delivered, payload.notes,
  )
  return ok(row, "Delivery updated successfully")


@router.post("/bulk", response_model=ApiResponse[BulkResult])
@fails_with("Failed to update deliveries")
def bulk_update(payload: BulkDeliveryUpdate, store: Store = Depends(get_store)):
  day, shift = _require(payload.date, payload.shift)
  result = ledger.bulk_update(store, day, shift, payload.deliveries)
  return ok(result, "Deliveries updated successfully")


@router.post("/autofill", response_model=ApiResponse[CountResult])
@fails_with("Failed to autofill deliveries")
def autofill(payload: ShiftSelection, store: Store = Depends(get_store)):
  day, shift = _require(payload.date, payload.shift)
  count = ledger.autofill(store, day, shift)
  return ok(CountResult(count=count), f"Autofilled {count} deliveries")


@router.post("/clear", response_model=ApiResponse[CountResult])
@fails_with("Failed to clear deliveries")
def clear(payload: ShiftSelection, store: Store = Depends(get_store)):
  day, shift = _require(payload.date, payload.shift)
  count = ledger.clear(store, day, shift)
  return ok(CountResult(count=count), "Deliveries cleared successfully")
