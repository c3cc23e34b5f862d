"""View model behind the customer management screen."""

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError

from tailor_billing.core.reconciler import CustomerOverview, reconcile
from tailor_billing.core.types import Customer, CustomerStats
from tailor_billing.errors import ApiError, DraftValidationError

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "phone", "email", "address", "notes")


def validate_customer_form(form: dict) -> List[str]:
    errors = []
    if not (form.get("name") or "").strip():
        errors.append("Name is required")
    if not (form.get("phone") or "").strip():
        errors.append("Phone is required")
    return errors


class CustomerScreen:
    def __init__(self, api):
        self.api = api

        # Rendered with these until the first loads resolve
        self.customers: List[Customer] = []
        self.stats = CustomerStats()

        self.search_term = ""
        self.selected_customer: Optional[Customer] = None

        self.is_loading = False
        self.is_submitting = False
        self.error: Optional[str] = None
        self.message: Optional[str] = None

        self.closed = False

    def close(self):
        self.closed = True

    @property
    def overview(self) -> CustomerOverview:
        return reconcile(self.customers, self.stats, self.search_term)

    # ================== Load Data ==================
    async def refresh(self):
        self.is_loading = True
        try:
            await asyncio.gather(self.load_customers(), self.load_stats())
        finally:
            self.is_loading = False

    async def load_customers(self):
        try:
            records = await asyncio.to_thread(self.api.list_customers, search=self.search_term or None)
            customers = [Customer.model_validate(r) for r in records or []]
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to load customers"
            return
        except ValidationError as exc:
            logger.warning("Unexpected customer records: %s", exc)
            if not self.closed:
                self.error = "Failed to load customers"
            return

        if self.closed:
            return
        self.customers = customers

    async def load_stats(self):
        try:
            res = await asyncio.to_thread(self.api.get_customer_stats)
            stats = CustomerStats.model_validate(res or {})
        except (ApiError, ValidationError) as exc:
            # Stats card keeps its last values
            logger.warning("Failed to load customer stats: %s", exc)
            return

        if self.closed:
            return
        self.stats = stats

    async def search(self, term: str):
        self.search_term = term
        await self.load_customers()

    # ================== Handlers ==================
    async def add_customer(self, form: dict) -> Optional[Customer]:
        customer = await self._submit(form, self.api.create_customer)
        if customer is None:
            return None

        self.message = f"{customer.name} added successfully"
        await self.refresh()
        return customer

    async def update_customer(self, customer_id, form: dict) -> Optional[Customer]:
        customer = await self._submit(form, self.api.update_customer, customer_id)
        if customer is None:
            return None

        self.message = "Customer updated successfully"
        await self.load_customers()
        return customer

    async def _submit(self, form, call, *args) -> Optional[Customer]:
        errors = validate_customer_form(form)
        if errors:
            self.error = str(DraftValidationError(errors))
            return None

        payload = {key: form.get(key) for key in CUSTOMER_FIELDS if key in form}
        self.error = None
        self.is_submitting = True
        try:
            record = await asyncio.to_thread(call, *args, payload)
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to save customer"
            return None
        finally:
            self.is_submitting = False

        if self.closed:
            return None
        try:
            return Customer.model_validate(record)
        except ValidationError as exc:
            logger.warning("Unexpected customer record: %s", exc)
            self.error = "Failed to save customer"
            return None

    async def delete_customer(self, customer_id) -> Optional[int]:
        """Delete a customer and their bills, then reload list and stats."""
        try:
            res = await asyncio.to_thread(self.api.delete_customer, customer_id)
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to delete customer"
            return None

        if self.closed:
            return None

        deleted_bills = (res or {}).get("deleted_bills") or 0
        self.message = f"Removed customer with {deleted_bills} bills."
        await self.refresh()
        return deleted_bills

    async def view_customer(self, customer_id) -> Optional[Customer]:
        try:
            record = await asyncio.to_thread(self.api.get_customer, customer_id)
        except ApiError as exc:
            if not self.closed:
                self.error = exc.message or "Failed to load customer details"
            return None

        if self.closed:
            return None
        try:
            self.selected_customer = Customer.model_validate(record)
        except ValidationError as exc:
            logger.warning("Unexpected customer record: %s", exc)
            self.error = "Failed to load customer details"
            return None
        return self.selected_customer
