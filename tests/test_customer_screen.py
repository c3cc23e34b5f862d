import asyncio
from decimal import Decimal

import pytest

from tailor_billing.screens.customers import CustomerScreen, validate_customer_form


@pytest.fixture
def screen(fake_api):
    fake_api.customers = [
        {"id": 1, "name": "Asha Rao", "phone": "9845000001", "total_spent": 1200, "outstanding_balance": 200},
        {"id": 2, "name": "Farida", "phone": "9845000002", "total_spent": 300},
    ]
    fake_api.stats = {
        "total_customers": 2,
        "customers_with_outstanding": 1,
        "total_outstanding_amount": 200,
    }
    return CustomerScreen(fake_api)


def test_initial_render_uses_defaults(screen):
    overview = screen.overview
    assert overview.customers == []
    assert overview.total_customers == 0
    assert overview.visible_revenue == 0


def test_stats_arriving_first(screen):
    asyncio.run(screen.load_stats())

    overview = screen.overview
    assert overview.customers == []
    assert overview.total_customers == 2

    asyncio.run(screen.load_customers())

    overview = screen.overview
    assert [c.name for c in overview.customers] == ["Asha Rao", "Farida"]
    assert overview.visible_revenue == Decimal("1500")


def test_customers_arriving_first(screen):
    asyncio.run(screen.load_customers())

    overview = screen.overview
    assert len(overview.customers) == 2
    assert overview.total_outstanding_amount == 0

    asyncio.run(screen.load_stats())

    assert screen.overview.total_outstanding_amount == Decimal("200")
    assert screen.error is None


def test_refresh_loads_both(screen, fake_api):
    asyncio.run(screen.refresh())

    assert len(screen.customers) == 2
    assert screen.stats.customers_with_outstanding == 1
    assert screen.is_loading is False
    assert fake_api.called("list_customers") == [(None,)]


def test_failed_list_keeps_stale_customers(screen, fake_api):
    asyncio.run(screen.refresh())
    fake_api.fail.add("list_customers")
    fake_api.customers = []

    asyncio.run(screen.load_customers())

    assert screen.error == "list_customers failed"
    assert len(screen.customers) == 2


def test_failed_stats_are_silent(screen, fake_api):
    asyncio.run(screen.refresh())
    fake_api.fail.add("get_customer_stats")

    asyncio.run(screen.load_stats())

    assert screen.error is None
    assert screen.stats.total_customers == 2


def test_search_filters_locally_and_refetches(screen, fake_api):
    asyncio.run(screen.refresh())
    asyncio.run(screen.search("FAR"))

    assert fake_api.called("list_customers")[-1] == ("FAR",)
    assert [c.name for c in screen.overview.customers] == ["Farida"]


def test_add_customer_requires_name_and_phone(screen, fake_api):
    result = asyncio.run(screen.add_customer({"name": "Geeta", "phone": " "}))

    assert result is None
    assert screen.error == "Phone is required"
    assert fake_api.called("create_customer") == []


def test_add_customer_reloads(screen, fake_api):
    customer = asyncio.run(screen.add_customer({"name": "Geeta", "phone": "9000000003", "email": ""}))

    assert customer.name == "Geeta"
    assert screen.message == "Geeta added successfully"
    assert len(screen.customers) == 3
    assert fake_api.called("get_customer_stats")


def test_update_customer(screen, fake_api):
    asyncio.run(screen.refresh())

    customer = asyncio.run(screen.update_customer(2, {"name": "Farida Khan", "phone": "9845000002"}))

    assert customer.name == "Farida Khan"
    assert screen.message == "Customer updated successfully"
    assert [c.name for c in screen.customers][1] == "Farida Khan"


def test_update_failure_is_reported(screen, fake_api):
    fake_api.fail.add("update_customer")

    result = asyncio.run(screen.update_customer(2, {"name": "Farida", "phone": "1"}))

    assert result is None
    assert screen.error == "update_customer failed"
    assert screen.is_submitting is False


def test_delete_reloads_from_server(screen, fake_api):
    asyncio.run(screen.refresh())

    deleted = asyncio.run(screen.delete_customer(1))

    assert deleted == 2
    assert screen.message == "Removed customer with 2 bills."
    assert [c.id for c in screen.customers] == [2]


def test_delete_failure_leaves_list(screen, fake_api):
    asyncio.run(screen.refresh())
    fake_api.fail.add("delete_customer")

    assert asyncio.run(screen.delete_customer(1)) is None
    assert screen.error == "delete_customer failed"
    assert len(screen.customers) == 2


def test_view_customer(screen):
    customer = asyncio.run(screen.view_customer(1))
    assert customer.outstanding_balance == Decimal("200")
    assert screen.selected_customer == customer


def test_late_results_after_close_are_ignored(screen):
    screen.close()
    asyncio.run(screen.refresh())

    assert screen.customers == []
    assert screen.stats.total_customers == 0


def test_validate_customer_form():
    assert validate_customer_form({}) == ["Name is required", "Phone is required"]
    assert validate_customer_form({"name": "A", "phone": "1"}) == []


def test_partial_customer_record_sets_error(screen, fake_api):
    fake_api.customers.append({"id": 5, "phone": "98"})

    assert asyncio.run(screen.view_customer(5)) is None
    assert screen.error == "Failed to load customer details"
    assert screen.selected_customer is None


def test_partial_saved_record_sets_error(screen, fake_api):
    def update_customer(customer_id, payload):
        fake_api.calls.append(("update_customer", (customer_id, payload)))
        return {"id": customer_id, "phone": "98"}

    fake_api.update_customer = update_customer

    result = asyncio.run(screen.update_customer(5, {"name": "Geeta", "phone": "98"}))

    assert result is None
    assert screen.error == "Failed to save customer"
    assert screen.message is None
