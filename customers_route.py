# customers_route.py
from typing import List, Optional
from fastapi import APIRouter, Depends

import customers
from business_settings import SettingsCache, get_settings
from db import get_store
from errors import fails_with
from ledger import get_customer
from schemas import ApiResponse, CustomerCreate, CustomerOut, CustomerUpdate, ok
from store import Store

router = APIRouter(prefix="/customers", tags=["customers"])


def _out(rows) -> List[CustomerOut]:
  return [CustomerOut.model_validate(r) for r in rows]


@router.get("", response_model=ApiResponse[List[CustomerOut]])
@fails_with("Failed to fetch customers")
def list_customers(
  category: Optional[str] = None,
  active: Optional[bool] = None,
  store: Store = Depends(get_store),
):
  return ok(_out(customers.list_customers(store, category, active)))


@router.get("/category/{category}", response_model=ApiResponse[List[CustomerOut]])
@fails_with("Failed to fetch customers")
def list_by_category(category: str, store: Store = Depends(get_store)):
  return ok(_out(customers.by_category(store, category)))


@router.get("/{customer_id}", response_model=ApiResponse[CustomerOut])
@fails_with("Failed to fetch customer")
def read_customer(customer_id: str, store: Store = Depends(get_store)):
  return ok(CustomerOut.model_validate(get_customer(store, customer_id)))


@router.post("", response_model=ApiResponse[CustomerOut], status_code=201)
@fails_with("Failed to create customer")
def create_customer(
  payload: CustomerCreate,
  store: Store = Depends(get_store),
  settings: SettingsCache = Depends(get_settings),
):
  c = customers.create(store, payload.model_dump(mode="json"), settings.current.default_price_per_liter)
  return ok(CustomerOut.model_validate(c), "Customer created successfully")


@router.put("/{customer_id}", response_model=ApiResponse[CustomerOut])
@fails_with("Failed to update customer")
def update_customer(customer_id: str, payload: CustomerUpdate, store: Store = Depends(get_store)):
  changes = {
    k: v for k, v in payload.model_dump(mode="json", exclude_unset=True).items()
    if v is not None or k == "phone"
  }
  c = customers.update(store, customer_id, changes)
  return ok(CustomerOut.model_validate(c), "Customer updated successfully")


@router.delete("/{customer_id}", response_model=ApiResponse[None])
@fails_with("Failed to delete customer")
def delete_customer(customer_id: str, permanent: bool = False, store: Store = Depends(get_store)):
  customers.delete(store, customer_id, permanent)
  message = "Customer permanently deleted" if permanent else "Customer deactivated successfully"
  return ok(message=message)
