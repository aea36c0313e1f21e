# dashboard_route.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

import clock
import dashboard
import inventory
from business_settings import SettingsCache, get_settings
from db import get_store
from errors import fails_with
from schemas import ApiResponse, Comparison, DashboardStats, DateStr, SourceShare, TrendPoint, ok
from store import Store

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=ApiResponse[DashboardStats])
@fails_with("Failed to fetch dashboard statistics")
def stats(
  store: Store = Depends(get_store),
  settings: SettingsCache = Depends(get_settings),
  now: datetime = Depends(clock.now),
):
  return ok(dashboard.stats(store, now, settings.current.max_capacity))


@router.get("/comparison", response_model=ApiResponse[Comparison])
@fails_with("Failed to fetch comparison data")
def comparison(store: Store = Depends(get_store), now: datetime = Depends(clock.now)):
  return ok(dashboard.comparison(store, now.date()))


@router.get("/trends", response_model=ApiResponse[List[TrendPoint]])
@fails_with("Failed to fetch delivery trends")
def trends(
  start_date: Optional[DateStr] = Query(None, alias="startDate"),
  end_date: Optional[DateStr] = Query(None, alias="endDate"),
  customer_id: Optional[str] = Query(None, alias="customerId"),
  store: Store = Depends(get_store),
  now: datetime = Depends(clock.now),
):
  start, end = clock.window(start_date, end_date, now.date())
  return ok(dashboard.trends(store, start, end, customer_id))


@router.get("/sources", response_model=ApiResponse[List[SourceShare]])
@fails_with("Failed to fetch source stats")
def source_stats(
  start_date: Optional[DateStr] = Query(None, alias="startDate"),
  end_date: Optional[DateStr] = Query(None, alias="endDate"),
  store: Store = Depends(get_store),
  now: datetime = Depends(clock.now),
):
  start, end = clock.window(start_date, end_date, now.date())
  return ok(inventory.source_totals(store, start, end))
