import os

# In-memory database for every test run, set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from tailor_billing.config import settings
from tailor_billing.database import Base, engine
from tailor_billing.errors import ApiError
from tailor_billing.main import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "PDF_OUTPUT_DIR", str(tmp_path))

    with TestClient(app) as c:
        yield c


class FakeApi:
    """In-memory stand-in for ApiClient. Names in ``fail`` raise ApiError."""

    def __init__(self):
        self.calls = []
        self.fail = set()

        self.upi = {"upi_id": "shop@okaxis"}
        self.bill_response = {"bill": {"_id": "b-1", "bill_no": 7, "status": "pending"}}
        self.bills = []
        self.customers = []
        self.stats = {
            "total_customers": 0,
            "customers_with_outstanding": 0,
            "total_outstanding_amount": 0,
        }
        self.next_customer_id = 11

    def _call(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail:
            raise ApiError(f"{name} failed", status_code=500)

    def called(self, name):
        return [args for call, args in self.calls if call == name]

    def get_upi_settings(self):
        self._call("get_upi_settings")
        return self.upi

    def create_bill(self, payload):
        self._call("create_bill", payload)
        return self.bill_response

    def list_bills(self, **filters):
        self._call("list_bills", filters)
        return self.bills

    def list_customers(self, search=None):
        self._call("list_customers", search)
        return list(self.customers)

    def get_customer(self, customer_id):
        self._call("get_customer", customer_id)
        for c in self.customers:
            if c["id"] == customer_id:
                return c
        raise ApiError("Customer not found", status_code=404)

    def get_customer_stats(self):
        self._call("get_customer_stats")
        return self.stats

    def create_customer(self, payload):
        self._call("create_customer", payload)
        record = {"id": self.next_customer_id, **payload}
        self.next_customer_id += 1
        self.customers.append(record)
        return record

    def update_customer(self, customer_id, payload):
        self._call("update_customer", customer_id, payload)
        for c in self.customers:
            if c["id"] == customer_id:
                c.update(payload)
                return c
        raise ApiError("Customer not found", status_code=404)

    def delete_customer(self, customer_id):
        self._call("delete_customer", customer_id)
        self.customers = [c for c in self.customers if c["id"] != customer_id]
        return {"deleted_bills": 2}


@pytest.fixture
def fake_api():
    return FakeApi()
