# schemas.py
from datetime import datetime
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from models import CustomerCategory, Shift

T = TypeVar("T")


def _check_date(value: str) -> str:
  # stored dates are compared as strings, so only the zero-padded form is accepted
  try:
    datetime.strptime(value, "%Y-%m-%d")
  except ValueError:
    raise ValueError("date must be YYYY-MM-DD") from None
  if len(value) != 10:
    raise ValueError("date must be YYYY-MM-DD")
  return value


DateStr = Annotated[str, AfterValidator(_check_date)]


class CamelModel(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
  success: bool = True
  data: Optional[T] = None
  error: Optional[str] = None
  message: Optional[str] = None

  @model_serializer(mode="wrap")
  def drop_empty_members(self, handler):
    return {k: v for k, v in handler(self).items() if v is not None}


def ok(data=None, message: Optional[str] = None) -> ApiResponse:
  return ApiResponse(success=True, data=data, message=message)


# ---------- customers ----------

class CustomerCreate(CamelModel):
  name: str = Field(min_length=1)
  address: str = ""
  phone: Optional[str] = None
  category: CustomerCategory = CustomerCategory.REGULAR
  morning_quota: float = Field(default=0, ge=0)
  evening_quota: float = Field(default=0, ge=0)
  price_per_liter: Optional[float] = Field(default=None, ge=0)  # settings default when omitted


class CustomerUpdate(CamelModel):
  name: Optional[str] = Field(default=None, min_length=1)
  address: Optional[str] = None
  phone: Optional[str] = None
  category: Optional[CustomerCategory] = None
  morning_quota: Optional[float] = Field(default=None, ge=0)
  evening_quota: Optional[float] = Field(default=None, ge=0)
  price_per_liter: Optional[float] = Field(default=None, ge=0)
  is_active: Optional[bool] = None


class CustomerOut(CamelModel):
  id: str
  name: str
  address: str
  phone: Optional[str] = None
  category: str
  morning_quota: float
  evening_quota: float
  price_per_liter: float
  is_active: bool
  created_at: datetime
  updated_at: datetime


# ---------- deliveries ----------

class DeliveryOut(CamelModel):
  id: Optional[str] = None  # None for a placeholder row that is not stored yet
  customer_id: str
  customer_name: str
  date: str
  shift: str
  quota: float
  actual_amount: float
  delivered: bool
  notes: Optional[str] = None
  created_at: Optional[datetime] = None
  updated_at: Optional[datetime] = None


class DeliveryUpsert(CamelModel):
  customer_id: str
  date: DateStr
  shift: Shift
  actual_amount: float = Field(ge=0)
  delivered: bool
  notes: Optional[str] = None


class BulkEntry(CamelModel):
  customer_id: str
  actual_amount: float = Field(ge=0)
  delivered: bool
  notes: Optional[str] = None


class BulkDeliveryUpdate(CamelModel):
  date: Optional[DateStr] = None
  shift: Optional[Shift] = None
  deliveries: List[BulkEntry] = Field(default_factory=list)


class ShiftSelection(CamelModel):
  date: Optional[DateStr] = None
  shift: Optional[Shift] = None


class BulkResult(CamelModel):
  updated: int
  skipped: List[str]


class CountResult(CamelModel):
  count: int


class TodayTotal(CamelModel):
  total: float
  date: str


# ---------- stock & sources ----------

class StockCreate(CamelModel):
  date: DateStr
  shift: Shift
  source: str = Field(min_length=1)
  quantity: float = Field(gt=0)


class StockOut(CamelModel):
  id: str
  date: str
  shift: str
  source: str
  source_name: str
  quantity: float
  created_at: datetime


class InventoryOut(CamelModel):
  current_inventory: float
  max_capacity: float
  percentage: float
  low_stock: bool


class SourceOption(CamelModel):
  value: str
  label: str
  type: str


class SourceCreate(CamelModel):
  name: Optional[str] = None
  type: Optional[str] = None


class SourceUpdate(CamelModel):
  name: Optional[str] = Field(default=None, min_length=1)
  type: Optional[str] = Field(default=None, min_length=1)
  is_active: Optional[bool] = None


class SourceOut(CamelModel):
  id: str
  name: str
  type: str
  is_active: bool
  created_at: datetime
  updated_at: datetime


# ---------- billing ----------

class DailyBreakdown(CamelModel):
  date: str
  morning_amount: float
  evening_amount: float
  total_amount: float


class BillingSummary(CamelModel):
  customer_id: str
  customer_name: str
  customer_address: str
  month: int
  year: int
  total_liters: float
  price_per_liter: float
  total_amount: float
  previous_balance: float = 0
  paid_amount: float = 0
  total_due: float = 0
  daily_breakdown: List[DailyBreakdown]


class InvoiceCustomer(CamelModel):
  id: str
  name: str
  address: str
  phone: Optional[str] = None
  price_per_liter: float


class InvoiceDay(CamelModel):
  date: str
  morning: float
  evening: float


class InvoiceOut(CamelModel):
  customer: InvoiceCustomer
  month: int
  year: int
  total_liters: float
  total_amount: float
  daily_breakdown: List[InvoiceDay]


class TodayRevenue(CamelModel):
  revenue: float
  date: str


class PaymentCreate(CamelModel):
  customer_id: str
  amount: float = Field(gt=0)
  date: DateStr
  month: int = Field(ge=1, le=12)
  year: int = Field(ge=1900, le=9999)
  remarks: Optional[str] = None


class PaymentOut(CamelModel):
  id: str
  customer_id: str
  amount: float
  date: str
  month: int
  year: int
  remarks: Optional[str] = None
  created_at: datetime
  updated_at: datetime


# ---------- dashboard ----------

class WeeklyPoint(CamelModel):
  day: str
  amount: float


class DashboardStats(CamelModel):
  total_milk_today: float
  estimated_revenue_today: float
  active_customers: int
  current_stock: float
  max_capacity: float
  stock_percentage: float
  low_stock_alert: bool
  pending_deliveries: int
  weekly_overview: List[WeeklyPoint]


class Comparison(CamelModel):
  today: float
  yesterday: float
  percentage_change: int


class TrendPoint(CamelModel):
  date: str
  amount: float


class SourceShare(CamelModel):
  name: str
  value: float


# ---------- settings ----------

class SettingsOut(CamelModel):
  business_name: str
  business_address: str
  business_phone: str
  default_price_per_liter: float
  currency: str
  currency_symbol: str
  max_capacity: float
  payment_terms: int


class SettingsUpdate(CamelModel):
  business_name: Optional[str] = None
  business_address: Optional[str] = None
  business_phone: Optional[str] = None
  default_price_per_liter: Optional[float] = Field(default=None, ge=0)
  currency: Optional[str] = None
  currency_symbol: Optional[str] = None
  max_capacity: Optional[float] = Field(default=None, gt=0)
  payment_terms: Optional[int] = Field(default=None, ge=0)


class CustomerBilling(BillingSummary):
  settings: Optional[SettingsOut] = None
