"""View model behind the billing screen: new bill form, preview and history."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from tailor_billing.core.assembler import (
    assemble_bill,
    build_payment_link,
    draft_payload,
    should_show_payment_qr,
    validate_draft,
)
from tailor_billing.core.types import Bill, BillDraft
from tailor_billing.errors import ApiError, DraftValidationError
from tailor_billing.pdf_utils import generate_bill_pdf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillPreview:
    bill: Bill
    upi_id: str
    show_payment_qr: bool
    payment_link: Optional[str]
    amount_due: Decimal


class BillingScreen:
    def __init__(
        self,
        api,
        default_upi_id: str,
        payee_name: str = "MyShop",
        currency: str = "INR",
        today: Optional[date] = None,
    ):
        self.api = api
        self.upi_id = default_upi_id
        self.payee_name = payee_name
        self.currency = currency
        # Bill date when the backend sends no created_at
        self.today = today or date.today()

        self.current_bill: Optional[Bill] = None
        self.show_preview = False
        self.is_submitting = False
        self.is_loading = False
        self.error: Optional[str] = None
        self.message: Optional[str] = None

        self.bills: List[dict] = []
        self.customer_names: Dict[str, str] = {}

        # Walk-in customer ids created by this screen, by phone
        self.created_customers: Dict[str, object] = {}

        self.closed = False

    def close(self):
        self.closed = True

    # -------------------------
    # UPI SETTINGS (best effort)
    # -------------------------
    async def load_upi_settings(self):
        try:
            res = await asyncio.to_thread(self.api.get_upi_settings)
        except ApiError as exc:
            logger.warning("Failed to fetch UPI settings, keeping %s: %s", self.upi_id, exc)
            return

        if self.closed:
            return
        if isinstance(res, dict) and res.get("upi_id"):
            self.upi_id = res["upi_id"]

    # -------------------------
    # GENERATE BILL
    # -------------------------
    async def generate_bill(self, draft: BillDraft) -> Optional[Bill]:
        errors = validate_draft(draft)
        if errors:
            self.error = str(DraftValidationError(errors))
            return None

        self.error = None
        self.is_submitting = True
        try:
            if draft.customer_id is None:
                draft = draft.model_copy(
                    update={"customer_id": await self._walk_in_customer_id(draft)}
                )

            response = await asyncio.to_thread(self.api.create_bill, draft_payload(draft))
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to create bill"
            return None
        finally:
            self.is_submitting = False

        bill = assemble_bill(draft, response, today=self.today)
        if self.closed:
            return bill

        self.current_bill = bill
        self.show_preview = True
        self.message = f"Bill {bill.bill_no_display or '(number pending)'} created"
        logger.info("Bill %s created for %s", bill.id, bill.customer_name)
        return bill

    async def _walk_in_customer_id(self, draft: BillDraft):
        phone = draft.customer_phone.strip()
        if phone in self.created_customers:
            return self.created_customers[phone]

        customer = await asyncio.to_thread(
            self.api.create_customer,
            {
                "name": draft.customer_name.strip(),
                "phone": phone,
                "address": draft.customer_address.strip(),
            },
        )
        customer_id = customer.get("_id", customer.get("id"))
        self.created_customers[phone] = customer_id
        return customer_id

    def preview(self) -> Optional[BillPreview]:
        bill = self.current_bill
        if bill is None:
            return None

        show_qr = should_show_payment_qr(bill)
        return BillPreview(
            bill=bill,
            upi_id=self.upi_id,
            show_payment_qr=show_qr,
            payment_link=(
                build_payment_link(self.upi_id, self.payee_name, bill.balance, self.currency)
                if show_qr
                else None
            ),
            amount_due=bill.balance,
        )

    def close_preview(self):
        self.show_preview = False

    def print_bill(self, output_dir: Optional[str] = None) -> Optional[str]:
        """Write the two-copy bill for the current preview, returns the PDF path."""
        if self.current_bill is None:
            return None
        kwargs = {"output_dir": output_dir} if output_dir else {}
        return generate_bill_pdf(self.current_bill, upi_id=self.upi_id, **kwargs)

    # -------------------------
    # BILL HISTORY
    # -------------------------
    async def load_history(self, **filters):
        """
        Load bills and the customer list used for name lookup.

        The two calls are independent; each result is applied as soon as
        it arrives.
        """
        self.is_loading = True
        try:
            await asyncio.gather(self._load_bills(filters), self._load_customer_names())
        finally:
            self.is_loading = False

    async def _load_bills(self, filters):
        try:
            bills = await asyncio.to_thread(self.api.list_bills, **filters)
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to load bills"
            return
        if not self.closed:
            self.bills = list(bills or [])

    async def _load_customer_names(self):
        try:
            customers = await asyncio.to_thread(self.api.list_customers)
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to load customers"
            return
        if not self.closed:
            self.customer_names = {
                str(c.get("_id", c.get("id"))): c.get("name", "")
                for c in customers or []
            }

    def customer_name_for(self, bill: dict) -> str:
        name = self.customer_names.get(str(bill.get("customer_id")))
        return name or bill.get("customer_name") or "Unknown"
