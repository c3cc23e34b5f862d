from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class BillItemCreate(BaseModel):
    name: str = Field(min_length=1)
    item_type: Optional[str] = None
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class BillCreate(BaseModel):
    customer_id: Optional[int] = None
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    customer_address: Optional[str] = None

    items: List[BillItemCreate] = Field(min_length=1)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    advance: Decimal = Field(default=Decimal("0"), ge=0)

    due_date: Optional[date] = None
    special_instructions: Optional[str] = None

    design_images: List[str] = []
    drawings: List[str] = []
    signature: Optional[str] = None


class BillPaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    method: Optional[str] = None


class UpiSettingsUpdate(BaseModel):
    upi_id: str = Field(min_length=3)
