import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from sqlalchemy import func

from tailor_billing import models, schemas
from tailor_billing.config import settings
from tailor_billing.core.assembler import (
    assemble_bill,
    build_payment_link,
    format_bill_number,
)
from tailor_billing.core.money import (
    compute_balance,
    compute_subtotal,
    compute_total,
    to_decimal,
)
from tailor_billing.core.types import BillDraft, LineItem
from tailor_billing.database import get_db
from tailor_billing.pdf_utils import generate_bill_pdf
from tailor_billing.routes.settings import get_upi_id
from tailor_billing.utils.qr import make_qr_data_uri

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/bills",
    tags=["Bills"]
)


# --- Numbering / status helpers ---
def next_bill_number(db: Session) -> int:
    last = db.query(func.max(models.Bill.bill_no)).scalar()
    return (last or 0) + 1


def status_for(balance, paid_amount) -> models.BillStatus:
    if balance <= 0:
        return models.BillStatus.PAID
    if paid_amount > 0:
        return models.BillStatus.PARTIALLY_PAID
    return models.BillStatus.PENDING


def payment_qr(db: Session, balance):
    if balance <= 0:
        return None
    link = build_payment_link(get_upi_id(db), settings.PAYEE_NAME, balance, settings.CURRENCY)
    return make_qr_data_uri(link)


def get_bill_or_404(bill_id: int, db: Session) -> models.Bill:
    bill = db.query(models.Bill).filter(models.Bill.id == bill_id).first()
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


def serialize_bill(bill: models.Bill) -> dict:
    attachments = {kind: [] for kind in models.AttachmentKind}
    for a in bill.attachments:
        attachments[a.kind].append(a.data)
    signatures = attachments[models.AttachmentKind.SIGNATURE]

    return {
        "id": bill.id,
        "bill_no": bill.bill_no,
        "bill_no_str": format_bill_number(bill.bill_no),
        "customer_id": bill.customer_id,
        "customer_name": bill.customer_name,
        "customer_phone": bill.customer_phone,
        "customer_address": bill.customer_address,
        "items": [
            {
                "name": i.name,
                "item_type": i.item_type,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "amount": i.amount,
            }
            for i in bill.items
        ],
        "subtotal": bill.subtotal,
        "discount": bill.discount,
        "total": bill.total,
        "advance": bill.advance,
        "paid_amount": bill.paid_amount,
        "balance": bill.balance,
        "due_date": bill.due_date,
        "special_instructions": bill.special_instructions,
        "design_images": attachments[models.AttachmentKind.DESIGN_IMAGE],
        "drawings": attachments[models.AttachmentKind.DRAWING],
        "signature": signatures[0] if signatures else None,
        "status": bill.status.value,
        "qr_code": bill.qr_code,
        "created_at": bill.created_at,
    }


def bill_view(bill: models.Bill):
    """Stored bill as the printable view model; everything received so far counts as advance."""
    record = serialize_bill(bill)
    draft = BillDraft(
        customer_id=bill.customer_id,
        customer_name=bill.customer_name,
        customer_phone=bill.customer_phone,
        customer_address=bill.customer_address or "",
        items=[
            LineItem(
                name=i.name,
                item_type=i.item_type,
                quantity=i.quantity,
                unit_price=i.unit_price,
            )
            for i in bill.items
        ],
        discount=bill.discount,
        advance=bill.paid_amount,
        due_date=bill.due_date,
        special_instructions=bill.special_instructions or "",
        design_images=record["design_images"],
        drawings=record["drawings"],
        signature=record["signature"],
    )
    return assemble_bill(draft, record)


# -------------------------
# CREATE BILL
# -------------------------
@router.post("")
def create_bill(
    bill: schemas.BillCreate,
    db: Session = Depends(get_db)
):
    if bill.customer_id is not None:
        customer = db.query(models.Customer).filter(
            models.Customer.id == bill.customer_id
        ).first()
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
    else:
        # Walk-in: reuse the customer with this phone number or create one
        customer = db.query(models.Customer).filter(
            models.Customer.phone == bill.customer_phone.strip()
        ).first()
        if not customer:
            customer = models.Customer(
                name=bill.customer_name.strip(),
                phone=bill.customer_phone.strip(),
                address=bill.customer_address
            )
            db.add(customer)
            db.flush()

    # Totals are recomputed here, client-sent totals are ignored
    subtotal = compute_subtotal(bill.items)
    total = compute_total(subtotal, bill.discount)
    balance = compute_balance(total, bill.advance)

    new_bill = models.Bill(
        bill_no=next_bill_number(db),
        customer_id=customer.id,
        customer_name=bill.customer_name.strip(),
        customer_phone=bill.customer_phone.strip(),
        customer_address=bill.customer_address,
        subtotal=subtotal,
        discount=bill.discount,
        total=total,
        advance=bill.advance,
        paid_amount=bill.advance,
        balance=balance,
        due_date=bill.due_date,
        special_instructions=bill.special_instructions,
        status=status_for(balance, bill.advance),
        qr_code=payment_qr(db, balance),
    )

    for position, item in enumerate(bill.items):
        new_bill.items.append(models.BillItem(
            position=position,
            name=item.name.strip(),
            item_type=item.item_type,
            quantity=item.quantity,
            unit_price=item.unit_price,
            amount=item.quantity * item.unit_price
        ))

    for data in bill.design_images:
        new_bill.attachments.append(
            models.BillAttachment(kind=models.AttachmentKind.DESIGN_IMAGE, data=data)
        )
    for data in bill.drawings:
        new_bill.attachments.append(
            models.BillAttachment(kind=models.AttachmentKind.DRAWING, data=data)
        )
    if bill.signature:
        new_bill.attachments.append(
            models.BillAttachment(kind=models.AttachmentKind.SIGNATURE, data=bill.signature)
        )

    db.add(new_bill)
    db.commit()
    db.refresh(new_bill)

    logger.info("Created bill %s for customer %s", new_bill.bill_no, customer.id)
    return {"bill": serialize_bill(new_bill)}


# -------------------------
# LIST BILLS (HISTORY)
# -------------------------
@router.get("")
def list_bills(
    customer_id: int | None = None,
    status: models.BillStatus | None = None,
    from_date: str | None = None,  # YYYY-MM-DD
    to_date: str | None = None,    # YYYY-MM-DD
    db: Session = Depends(get_db)
):
    q = db.query(models.Bill)

    if customer_id is not None:
        q = q.filter(models.Bill.customer_id == customer_id)

    if status is not None:
        q = q.filter(models.Bill.status == status)

    if from_date is not None:
        q = q.filter(func.date(models.Bill.created_at) >= from_date)

    if to_date is not None:
        q = q.filter(func.date(models.Bill.created_at) <= to_date)

    bills = q.order_by(models.Bill.bill_no.desc()).all()

    return {"bills": [serialize_bill(b) for b in bills]}


# -------------------------
# GET BILL
# -------------------------
@router.get("/{bill_id}")
def get_bill(
    bill_id: int,
    db: Session = Depends(get_db)
):
    return {"bill": serialize_bill(get_bill_or_404(bill_id, db))}


# -------------------------
# PAY BILL
# -------------------------
@router.post("/{bill_id}/pay")
def pay_bill(
    bill_id: int,
    payment: schemas.BillPaymentCreate,
    db: Session = Depends(get_db)
):
    bill = get_bill_or_404(bill_id, db)

    if bill.status == models.BillStatus.PAID:
        raise HTTPException(
            status_code=400,
            detail="Bill is already paid"
        )

    # No overpayment allowed
    if payment.amount > bill.balance:
        raise HTTPException(
            status_code=400,
            detail="Payment exceeds balance"
        )

    bill.payments.append(models.Payment(amount=payment.amount, method=payment.method))

    bill.paid_amount = to_decimal(bill.paid_amount) + payment.amount
    bill.balance = compute_balance(bill.total, bill.paid_amount)
    bill.status = status_for(bill.balance, bill.paid_amount)
    bill.qr_code = payment_qr(db, bill.balance)

    db.commit()
    db.refresh(bill)

    logger.info("Payment of %s recorded on bill %s", payment.amount, bill.bill_no)
    return {"bill": serialize_bill(bill)}


# -------------------------
# DOWNLOAD BILL PDF
# -------------------------
@router.get("/{bill_id}/pdf")
def download_bill_pdf(
    bill_id: int,
    db: Session = Depends(get_db)
):
    bill = get_bill_or_404(bill_id, db)

    pdf_path = generate_bill_pdf(
        bill_view(bill),
        upi_id=get_upi_id(db),
        output_dir=settings.PDF_OUTPUT_DIR
    )

    return FileResponse(
        path=pdf_path,
        media_type="application/pdf",
        filename=f"bill_{format_bill_number(bill.bill_no)}.pdf"
    )
