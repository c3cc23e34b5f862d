from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field

from tailor_billing.core.money import to_decimal

Money = Annotated[Decimal, BeforeValidator(to_decimal)]
RecordId = Union[int, str]


# ------------------------
# BILLS
# ------------------------

class LineItem(BaseModel):
    name: str
    quantity: Money = Decimal("1")
    unit_price: Money = Decimal("0")
    item_type: Optional[str] = None

    class Config:
        frozen = True


class BillDraft(BaseModel):
    """Form state of a bill before it is submitted."""

    customer_id: Optional[RecordId] = None
    customer_name: str = ""
    customer_phone: str = ""
    customer_address: str = ""

    items: List[LineItem] = []
    discount: Money = Decimal("0")
    advance: Money = Decimal("0")

    due_date: Optional[date] = None
    special_instructions: str = ""

    # Opaque data URIs, never inspected
    design_images: List[str] = []
    drawings: List[str] = []
    signature: Optional[str] = None


class Bill(BaseModel):
    """A submitted bill as shown in the preview and printed."""

    id: Optional[RecordId] = None
    bill_no_display: Optional[str] = None

    customer_id: Optional[RecordId] = None
    customer_name: str
    customer_phone: str
    customer_address: str = ""

    items: List[LineItem]
    subtotal: Money
    discount: Money
    total: Money
    advance: Money
    balance: Money

    due_date: Optional[date] = None
    special_instructions: str = ""
    design_images: List[str] = []
    drawings: List[str] = []
    signature: Optional[str] = None

    created_date: date
    status: str = "pending"
    qr_code: Optional[str] = None

    class Config:
        frozen = True

    @property
    def total_quantity(self) -> Decimal:
        return sum((item.quantity for item in self.items), Decimal("0"))


# ------------------------
# CUSTOMERS
# ------------------------

class BillSummary(BaseModel):
    bill_no_str: Optional[str] = None
    total: Money = Decimal("0")
    status: Optional[str] = None


class Customer(BaseModel):
    id: RecordId = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Computed by the backend
    total_orders: int = 0
    total_spent: Money = Decimal("0")
    outstanding_balance: Money = Decimal("0")

    bills: List[BillSummary] = []


class CustomerStats(BaseModel):
    total_customers: int = 0
    customers_with_outstanding: int = 0
    total_outstanding_amount: Money = Decimal("0")
