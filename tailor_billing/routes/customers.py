import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from tailor_billing import models, schemas
from tailor_billing.core.assembler import format_bill_number
from tailor_billing.core.money import ZERO, to_decimal
from tailor_billing.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"])


def get_customer_or_404(customer_id: int, db: Session) -> models.Customer:
    customer = db.query(models.Customer).filter(
        models.Customer.id == customer_id
    ).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


def serialize_customer(customer: models.Customer, include_bills: bool = False) -> dict:
    total_spent = ZERO
    outstanding = ZERO

    for bill in customer.bills:
        total_spent += to_decimal(bill.total)
        if bill.balance > 0:
            outstanding += to_decimal(bill.balance)

    result = {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "address": customer.address,
        "notes": customer.notes,
        "created_at": customer.created_at,
        "updated_at": customer.updated_at,
        "total_orders": len(customer.bills),
        "total_spent": total_spent,
        "outstanding_balance": outstanding,
    }

    if include_bills:
        result["bills"] = [
            {
                "id": b.id,
                "bill_no_str": format_bill_number(b.bill_no),
                "total": b.total,
                "balance": b.balance,
                "status": b.status.value,
                "created_at": b.created_at,
            }
            for b in customer.bills
        ]

    return result


@router.post("")
def create_customer(customer: schemas.CustomerCreate, db: Session = Depends(get_db)):
    new_customer = models.Customer(
        name=customer.name.strip(),
        phone=customer.phone.strip(),
        email=customer.email,
        address=customer.address,
        notes=customer.notes
    )
    db.add(new_customer)
    db.commit()
    db.refresh(new_customer)

    logger.info("Created customer %s", new_customer.id)
    return {"customer": serialize_customer(new_customer)}


@router.get("")
def list_customers(
    search: str | None = Query(None, description="Name or phone"),
    db: Session = Depends(get_db)
):
    q = db.query(models.Customer)

    if search:
        # % and _ in the term are matched literally
        term = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        q = q.filter(
            (models.Customer.name.ilike(f"%{term}%", escape="\\")) |
            (models.Customer.phone.ilike(f"%{term}%", escape="\\"))
        )

    customers = q.order_by(models.Customer.created_at.desc(), models.Customer.id.desc()).all()
    return {"customers": [serialize_customer(c) for c in customers]}


# Declared before /{customer_id} so "stats" is not read as an id
@router.get("/stats")
def customer_stats(db: Session = Depends(get_db)):
    total_customers = db.query(func.count(models.Customer.id)).scalar() or 0

    with_outstanding = (
        db.query(func.count(func.distinct(models.Bill.customer_id)))
        .filter(models.Bill.balance > 0)
        .scalar()
    ) or 0

    total_outstanding = (
        db.query(func.sum(models.Bill.balance))
        .filter(models.Bill.balance > 0)
        .scalar()
    )

    return {
        "total_customers": total_customers,
        "customers_with_outstanding": with_outstanding,
        "total_outstanding_amount": to_decimal(total_outstanding),
    }


@router.get("/{customer_id}")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = get_customer_or_404(customer_id, db)
    return {"customer": serialize_customer(customer, include_bills=True)}


@router.put("/{customer_id}")
def update_customer(
    customer_id: int,
    changes: schemas.CustomerUpdate,
    db: Session = Depends(get_db)
):
    customer = get_customer_or_404(customer_id, db)

    for field, value in changes.model_dump(exclude_unset=True).items():
        if field in ("name", "phone"):
            if not value or not value.strip():
                raise HTTPException(
                    status_code=400,
                    detail="Name and phone are required"
                )
            value = value.strip()
        setattr(customer, field, value)

    db.commit()
    db.refresh(customer)
    return {"customer": serialize_customer(customer)}


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = get_customer_or_404(customer_id, db)

    # Bills go with the customer (cascade)
    deleted_bills = len(customer.bills)
    db.delete(customer)
    db.commit()

    logger.info("Deleted customer %s with %s bills", customer_id, deleted_bills)
    return {
        "deleted_bills": deleted_bills,
        "message": "Customer deleted"
    }
