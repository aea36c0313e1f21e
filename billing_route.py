# billing_route.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends

import billing
import clock
from business_settings import SettingsCache, get_settings
from db import get_store
from errors import fails_with
from schemas import (
  ApiResponse, BillingSummary, CustomerBilling, InvoiceOut, PaymentCreate,
  PaymentOut, TodayRevenue, ok,
)
from store import Store

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/monthly", response_model=ApiResponse[List[BillingSummary]])
@fails_with("Failed to fetch monthly billing")
def monthly_billing(
  month: Optional[int] = None,
  year: Optional[int] = None,
  store: Store = Depends(get_store),
):
  month, year = billing.check_period(month, year)
  return ok(billing.monthly(store, month, year))


@router.get("/customer/{customer_id}", response_model=ApiResponse[CustomerBilling])
@fails_with("Failed to fetch customer billing")
def customer_billing(
  customer_id: str,
  month: Optional[int] = None,
  year: Optional[int] = None,
  store: Store = Depends(get_store),
  settings: SettingsCache = Depends(get_settings),
):
  month, year = billing.check_period(month, year)
  return ok(billing.customer_billing(store, customer_id, month, year, settings.current))


@router.get("/customer/{customer_id}/invoice", response_model=ApiResponse[InvoiceOut])
@fails_with("Failed to fetch customer invoice")
def customer_invoice(
  customer_id: str,
  month: Optional[int] = None,
  year: Optional[int] = None,
  store: Store = Depends(get_store),
):
  month, year = billing.check_period(month, year)
  return ok(billing.customer_invoice(store, customer_id, month, year))


@router.get("/today-revenue", response_model=ApiResponse[TodayRevenue])
@fails_with("Failed to calculate today revenue")
def today_revenue(store: Store = Depends(get_store), now: datetime = Depends(clock.now)):
  return ok(billing.today_revenue(store, clock.fmt(now.date())))


@router.post("/payment", response_model=ApiResponse[PaymentOut], status_code=201)
@fails_with("Failed to record payment")
def record_payment(payload: PaymentCreate, store: Store = Depends(get_store)):
  payment = billing.record_payment(
    store, payload.customer_id, payload.amount, payload.date,
    payload.month, payload.year, payload.remarks,
  )
  return ok(PaymentOut.model_validate(payment), "Payment recorded successfully")
