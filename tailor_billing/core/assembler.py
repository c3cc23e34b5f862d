"""Turns a submitted bill draft plus the backend's answer into a Bill.

The backend has answered bill creation in several shapes over time:
the bill may be wrapped in ``{"bill": ...}``, the id may be ``_id`` or
``id``, and the bill number may arrive pre-formatted (``bill_no_str`` or
``billNoStr``) or as a raw sequence (``bill_no``). All of that drift is
absorbed here so nothing past this module has to know about it.
"""

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from urllib.parse import urlencode

from tailor_billing.core.money import (
    compute_balance,
    compute_subtotal,
    compute_total,
    quantize,
)
from tailor_billing.core.types import Bill, BillDraft

BILL_NUMBER_WIDTH = 3


# ------------------------
# BILL NUMBER
# ------------------------

class BillNumberKind(str, enum.Enum):
    FORMATTED = "FORMATTED"
    SEQUENCE = "SEQUENCE"
    PENDING = "PENDING"


@dataclass(frozen=True)
class BillNumber:
    kind: BillNumberKind
    value: object = None

    @property
    def display(self) -> Optional[str]:
        if self.kind == BillNumberKind.FORMATTED:
            return self.value
        if self.kind == BillNumberKind.SEQUENCE:
            return format_bill_number(self.value)
        return None


def format_bill_number(sequence) -> str:
    return str(int(sequence)).zfill(BILL_NUMBER_WIDTH)


def _as_sequence(value) -> Optional[int]:
    """Whole, non-negative bill sequence or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, (float, Decimal)):
        if math.isfinite(value) and value >= 0 and value == int(value):
            return int(value)
        return None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def normalize_bill_number(payload: dict) -> BillNumber:
    for key in ("bill_no_str", "billNoStr"):
        value = payload.get(key)
        if value:
            return BillNumber(BillNumberKind.FORMATTED, str(value))

    sequence = payload.get("bill_no")
    if sequence is not None:
        number = _as_sequence(sequence)
        if number is None:
            # Not a sequence, show it as the backend sent it
            return BillNumber(BillNumberKind.FORMATTED, str(sequence))
        return BillNumber(BillNumberKind.SEQUENCE, number)

    return BillNumber(BillNumberKind.PENDING)


def unwrap_response(response) -> dict:
    if not isinstance(response, dict):
        return {}
    created = response.get("bill")
    if isinstance(created, dict):
        merged = dict(created)
        # Some responses keep the id next to the wrapper
        merged.setdefault("_id", response.get("_id"))
        return merged
    return response


def _created_date(payload: dict, today: Optional[date]) -> date:
    raw = payload.get("created_at") or payload.get("createdAt")
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    return today or date.today()


# ------------------------
# ASSEMBLY
# ------------------------

def assemble_bill(draft: BillDraft, response, today: Optional[date] = None) -> Bill:
    """
    Merge the local draft with the backend's creation response.

    Amounts always come from the draft: the response may echo totals
    computed from an older version of the form.
    """
    created = unwrap_response(response)

    subtotal = compute_subtotal(draft.items)
    total = compute_total(subtotal, draft.discount)
    balance = compute_balance(total, draft.advance)

    bill_id = created.get("_id")
    if bill_id is None:
        bill_id = created.get("id")

    customer_id = draft.customer_id
    if customer_id is None:
        customer_id = created.get("customer_id")

    return Bill(
        id=bill_id,
        bill_no_display=normalize_bill_number(created).display,
        customer_id=customer_id,
        customer_name=draft.customer_name,
        customer_phone=draft.customer_phone,
        customer_address=draft.customer_address,
        items=list(draft.items),
        subtotal=subtotal,
        discount=draft.discount,
        total=total,
        advance=draft.advance,
        balance=balance,
        due_date=draft.due_date,
        special_instructions=draft.special_instructions,
        design_images=list(draft.design_images),
        drawings=list(draft.drawings),
        signature=draft.signature,
        created_date=_created_date(created, today),
        status=created.get("status") or "pending",
        qr_code=created.get("qr_code") or created.get("qrCode"),
    )


def should_show_payment_qr(bill: Bill) -> bool:
    # Only the locally computed balance counts, never a server-reported one
    return bill.balance > 0


def build_payment_link(upi_id: str, payee_name: str, amount, currency: str = "INR") -> str:
    query = urlencode(
        {
            "pa": upi_id,
            "pn": payee_name,
            "am": f"{quantize(amount):.2f}",
            "cu": currency,
        },
        safe="@",
    )
    return f"upi://pay?{query}"


# ------------------------
# SUBMISSION
# ------------------------

def validate_draft(draft: BillDraft) -> List[str]:
    errors = []

    if not draft.customer_name.strip():
        errors.append("Customer name is required")
    if not draft.customer_phone.strip():
        errors.append("Customer phone is required")
    if not draft.items:
        errors.append("Add at least one item")

    for position, item in enumerate(draft.items, start=1):
        if not item.name.strip():
            errors.append(f"Item {position}: name is required")
        if item.quantity <= 0:
            errors.append(f"Item {position}: quantity must be greater than zero")
        if item.unit_price < 0:
            errors.append(f"Item {position}: price cannot be negative")

    if draft.discount < 0:
        errors.append("Discount cannot be negative")
    if draft.advance < 0:
        errors.append("Advance cannot be negative")

    return errors


def draft_payload(draft: BillDraft) -> dict:
    """JSON body for the create-bill call."""
    subtotal = compute_subtotal(draft.items)
    total = compute_total(subtotal, draft.discount)

    return {
        "customer_id": draft.customer_id,
        "customer_name": draft.customer_name.strip(),
        "customer_phone": draft.customer_phone.strip(),
        "customer_address": draft.customer_address.strip(),
        "items": [
            {
                "name": item.name.strip(),
                "item_type": item.item_type,
                "quantity": str(item.quantity),
                "unit_price": str(item.unit_price),
            }
            for item in draft.items
        ],
        "subtotal": str(subtotal),
        "discount": str(draft.discount),
        "total": str(total),
        "advance": str(draft.advance),
        "balance": str(compute_balance(total, draft.advance)),
        "due_date": draft.due_date.isoformat() if draft.due_date else None,
        "special_instructions": draft.special_instructions,
        "design_images": list(draft.design_images),
        "drawings": list(draft.drawings),
        "signature": draft.signature,
    }
