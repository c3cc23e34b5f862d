import asyncio
from decimal import Decimal

import pytest
import requests

from tailor_billing.client.api import ApiClient
from tailor_billing.core.types import BillDraft, LineItem
from tailor_billing.errors import ApiError
from tailor_billing.screens.billing import BillingScreen
from tailor_billing.screens.customers import CustomerScreen


@pytest.fixture
def api(client):
    return ApiClient(base_url="http://testserver", session=client)


def test_customer_round_trip(api):
    created = api.create_customer({"name": "Asha Rao", "phone": "9845000001"})

    assert api.get_customer(created["id"])["name"] == "Asha Rao"
    assert [c["name"] for c in api.list_customers(search="asha")] == ["Asha Rao"]
    assert api.list_customers(search="nobody") == []

    updated = api.update_customer(created["id"], {"notes": "Measurements on file"})
    assert updated["notes"] == "Measurements on file"

    assert api.get_customer_stats()["total_customers"] == 1
    assert api.delete_customer(created["id"])["deleted_bills"] == 0


def test_bills(api):
    response = api.create_bill({
        "customer_name": "Lakshmi",
        "customer_phone": "9876543210",
        "items": [{"name": "Blouse", "quantity": "1", "unit_price": "650"}],
    })

    assert response["bill"]["bill_no_str"] == "001"
    assert api.get_bill(response["bill"]["id"])["total"] == 650
    assert len(api.list_bills(status="pending")) == 1
    assert api.list_bills(status="paid") == []


def test_backend_detail_becomes_error_message(api):
    with pytest.raises(ApiError) as exc_info:
        api.get_customer(999)

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Customer not found"


def test_transport_failure_is_api_error():
    class DownSession:
        def request(self, *args, **kwargs):
            raise requests.ConnectionError("connection refused")

    api = ApiClient(base_url="http://shop.local", session=DownSession())

    with pytest.raises(ApiError) as exc_info:
        api.get_upi_settings()

    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.message


def test_billing_screen_against_backend(api):
    api.session.put("/api/settings/upi", json={"upi_id": "tailor@okicici"})
    screen = BillingScreen(api, default_upi_id="fallback@upi", payee_name="Raghu Tailors")

    asyncio.run(screen.load_upi_settings())
    bill = asyncio.run(screen.generate_bill(BillDraft(
        customer_name="Lakshmi",
        customer_phone="9876543210",
        items=[
            LineItem(name="Blouse", quantity=2, unit_price=500),
            LineItem(name="Fall & pico", quantity=1, unit_price=300),
        ],
        discount=100,
        advance=400,
    )))

    assert screen.error is None
    assert bill.bill_no_display == "001"
    assert bill.balance == Decimal("800")
    assert bill.status == "partially_paid"
    assert bill.qr_code.startswith("data:image/png;base64,")

    preview = screen.preview()
    assert preview.upi_id == "tailor@okicici"
    assert preview.payment_link == "upi://pay?pa=tailor@okicici&pn=Raghu+Tailors&am=800.00&cu=INR"


def test_customer_screen_against_backend(api):
    asha = api.create_customer({"name": "Asha Rao", "phone": "9845000001"})
    api.create_customer({"name": "Farida", "phone": "9845000002"})
    api.create_bill({
        "customer_id": asha["id"],
        "customer_name": "Asha Rao",
        "customer_phone": "9845000001",
        "items": [{"name": "Lehenga", "quantity": 1, "unit_price": 2500}],
        "advance": 1000,
    })
    screen = CustomerScreen(api)

    asyncio.run(screen.refresh())

    overview = screen.overview
    assert overview.total_customers == 2
    assert overview.customers_with_outstanding == 1
    assert overview.total_outstanding_amount == Decimal("1500")
    assert overview.visible_revenue == Decimal("2500")

    deleted = asyncio.run(screen.delete_customer(asha["id"]))

    assert deleted == 1
    assert [c.name for c in screen.customers] == ["Farida"]
    assert screen.overview.total_outstanding_amount == 0
