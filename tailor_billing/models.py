from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Enum
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from tailor_billing.database import Base

# Money columns keep exact decimals
Amount = Numeric(12, 2, asdecimal=True)


# ------------------------
# ENUMS
# ------------------------

class BillStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class AttachmentKind(str, enum.Enum):
    DESIGN_IMAGE = "design_image"
    DRAWING = "drawing"
    SIGNATURE = "signature"


# ------------------------
# CUSTOMER
# ------------------------

class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    bills = relationship(
        "Bill",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Bill.bill_no"
    )


# ------------------------
# BILL
# ------------------------

class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    bill_no = Column(Integer, unique=True, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    status = Column(Enum(BillStatus), default=BillStatus.PENDING)

    # Copied from the form so the printed bill survives customer edits
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    customer_address = Column(String, nullable=True)

    subtotal = Column(Amount, default=0)
    discount = Column(Amount, default=0)
    total = Column(Amount, default=0)
    advance = Column(Amount, default=0)
    paid_amount = Column(Amount, default=0)   # advance + later payments
    balance = Column(Amount, default=0)

    due_date = Column(Date, nullable=True)
    special_instructions = Column(Text, nullable=True)
    qr_code = Column(Text, nullable=True)     # data URI, only while balance > 0

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    customer = relationship("Customer", back_populates="bills")
    items = relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.position"
    )
    payments = relationship(
        "Payment",
        back_populates="bill",
        cascade="all, delete-orphan"
    )
    attachments = relationship(
        "BillAttachment",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillAttachment.id"
    )


# ------------------------
# BILL ITEMS
# ------------------------

class BillItem(Base):
    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    name = Column(String, nullable=False)
    item_type = Column(String, nullable=True)
    quantity = Column(Amount, nullable=False)
    unit_price = Column(Amount, nullable=False)
    amount = Column(Amount, nullable=False)

    bill = relationship("Bill", back_populates="items")


# ------------------------
# PAYMENTS
# ------------------------

class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)

    amount = Column(Amount, nullable=False)
    method = Column(String, nullable=True)  # CASH / UPI / etc

    created_at = Column(DateTime, default=datetime.utcnow)

    bill = relationship("Bill", back_populates="payments")


# ------------------------
# ATTACHMENTS
# ------------------------

class BillAttachment(Base):
    __tablename__ = "bill_attachments"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)

    kind = Column(Enum(AttachmentKind), nullable=False)
    data = Column(Text, nullable=False)

    bill = relationship("Bill", back_populates="attachments")


# ------------------------
# SHOP SETTINGS
# ------------------------

class ShopSetting(Base):
    __tablename__ = "shop_settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=True)

    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )
