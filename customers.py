# customers.py
import logging
from typing import List, Optional

from errors import ValidationError
from filters import CustomerFilter, DeliveryFilter, PaymentFilter, asc
from ledger import get_customer
from models import Customer, CustomerCategory, Delivery, Payment
from store import Store

logger = logging.getLogger(__name__)

CATEGORIES = [c.value for c in CustomerCategory]


def list_customers(store: Store, category: Optional[str] = None,
                   active: Optional[bool] = None) -> List[Customer]:
  # an unknown category is ignored rather than rejected
  if category not in CATEGORIES:
    category = None
  return store.find_many(Customer, CustomerFilter(category=category, active=active), order_by=[asc("name")])


def by_category(store: Store, category: str) -> List[Customer]:
  if category not in CATEGORIES:
    raise ValidationError('Invalid category. Must be "regular" or "variable"')
  return store.find_many(Customer, CustomerFilter(category=category, active=True), order_by=[asc("name")])


def create(store: Store, data: dict, default_price: float) -> Customer:
  if data.get("price_per_liter") is None:
    data["price_per_liter"] = default_price
  customer = Customer(**data, is_active=True)
  with store.transaction():
    store.add(customer)
  logger.info("customer created: %s", customer.name)
  return customer


def update(store: Store, customer_id: str, changes: dict) -> Customer:
  customer = get_customer(store, customer_id)
  for k, v in changes.items():
    setattr(customer, k, v)
  with store.transaction():
    store.save(customer)
  return customer


def delete(store: Store, customer_id: str, permanent: bool = False) -> None:
  customer = get_customer(store, customer_id)
  with store.transaction():
    if not permanent:
      customer.is_active = False
      store.save(customer)
      return
    for row in store.find_many(Delivery, DeliveryFilter(customer_id=customer.id)):
      store.delete(row)
    for row in store.find_many(Payment, PaymentFilter(customer_id=customer.id)):
      store.delete(row)
    store.delete(customer)
  logger.info("customer %s deleted permanently", customer.name)
