# models.py
from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Shift(str, Enum):
  MORNING = "morning"
  EVENING = "evening"


class CustomerCategory(str, Enum):
  REGULAR = "regular"    # fixed daily amount, households
  VARIABLE = "variable"  # shops, amount changes day to day


def new_id() -> str:
  return str(uuid4())


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


class Customer(SQLModel, table=True):
  id: str = Field(default_factory=new_id, primary_key=True)
  name: str = Field(index=True)
  address: str
  phone: Optional[str] = None
  category: str = CustomerCategory.REGULAR.value
  morning_quota: float = 0
  evening_quota: float = 0
  price_per_liter: float = 0
  is_active: bool = Field(default=True, index=True)
  created_at: datetime = Field(default_factory=utcnow)
  updated_at: datetime = Field(default_factory=utcnow)

  def quota_for(self, shift: str) -> float:
    return self.morning_quota if shift == Shift.MORNING.value else self.evening_quota


class Delivery(SQLModel, table=True):
  __table_args__ = (
    UniqueConstraint("customer_id", "date", "shift", name="uq_delivery_customer_date_shift"),
  )

  id: str = Field(default_factory=new_id, primary_key=True)
  customer_id: str = Field(foreign_key="customer.id", index=True)
  date: str = Field(index=True)  # YYYY-MM-DD
  shift: str
  quota: float = 0  # customer quota when the row was created
  actual_amount: float = 0
  delivered: bool = False
  notes: Optional[str] = None
  created_at: datetime = Field(default_factory=utcnow)
  updated_at: datetime = Field(default_factory=utcnow)


class Stock(SQLModel, table=True):
  id: str = Field(default_factory=new_id, primary_key=True)
  date: str = Field(index=True)
  shift: str
  source: str       # source name or id as submitted
  source_name: str  # resolved display name
  quantity: float
  created_at: datetime = Field(default_factory=utcnow)


class Source(SQLModel, table=True):
  id: str = Field(default_factory=new_id, primary_key=True)
  name: str = Field(unique=True, index=True)
  type: str
  is_active: bool = True
  created_at: datetime = Field(default_factory=utcnow)
  updated_at: datetime = Field(default_factory=utcnow)


class Payment(SQLModel, table=True):
  id: str = Field(default_factory=new_id, primary_key=True)
  customer_id: str = Field(foreign_key="customer.id", index=True)
  amount: float
  date: str
  month: int
  year: int
  remarks: Optional[str] = None
  created_at: datetime = Field(default_factory=utcnow)
  updated_at: datetime = Field(default_factory=utcnow)


class BusinessSettings(SQLModel, table=True):
  __tablename__ = "settings"

  id: int = Field(default=1, primary_key=True)
  business_name: str = "MilkyWay Dairy Services"
  business_address: str = "123 Farm Lane, Countryside"
  business_phone: str = "+91 234 567 890"
  default_price_per_liter: float = 2.0
  currency: str = "INR"
  currency_symbol: str = "₹"
  max_capacity: float = 2000
  payment_terms: int = 5  # days
