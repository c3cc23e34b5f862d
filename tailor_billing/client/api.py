import logging
from typing import Optional

import requests

from tailor_billing.config import settings
from tailor_billing.errors import ApiError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin wrapper over the shop backend's REST API.

    Every method returns the decoded JSON body. Transport failures and
    error statuses are raised as ApiError with the backend's ``detail``
    when it sent one.
    """

    def __init__(self, base_url: Optional[str] = None, session=None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.API_TIMEOUT_SECONDS

    def _request(self, method: str, path: str, params=None, json=None):
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        try:
            response = self.session.request(
                method, url, params=params or None, json=json, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach the server: {exc}") from exc

        if response.status_code >= 400:
            message = f"Request failed with status {response.status_code}"
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("detail"):
                    message = str(body["detail"])
            except ValueError:
                pass
            logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Server sent an invalid response") from exc

    # -------------------------
    # BILLS
    # -------------------------
    def create_bill(self, payload: dict) -> dict:
        return self._request("POST", "/api/bills", json=payload)

    def list_bills(self, customer_id=None, status=None, from_date=None, to_date=None) -> list:
        body = self._request(
            "GET",
            "/api/bills",
            params={
                "customer_id": customer_id,
                "status": status,
                "from_date": from_date,
                "to_date": to_date,
            },
        )
        return body.get("bills", []) if isinstance(body, dict) else body

    def get_bill(self, bill_id) -> dict:
        body = self._request("GET", f"/api/bills/{bill_id}")
        return body.get("bill", body)

    # -------------------------
    # CUSTOMERS
    # -------------------------
    def list_customers(self, search: Optional[str] = None) -> list:
        body = self._request("GET", "/api/customers", params={"search": search})
        return body.get("customers", []) if isinstance(body, dict) else body

    def get_customer(self, customer_id) -> dict:
        body = self._request("GET", f"/api/customers/{customer_id}")
        return body.get("customer", body)

    def get_customer_stats(self) -> dict:
        return self._request("GET", "/api/customers/stats")

    def create_customer(self, payload: dict) -> dict:
        body = self._request("POST", "/api/customers", json=payload)
        return body.get("customer", body)

    def update_customer(self, customer_id, payload: dict) -> dict:
        body = self._request("PUT", f"/api/customers/{customer_id}", json=payload)
        return body.get("customer", body)

    def delete_customer(self, customer_id) -> dict:
        return self._request("DELETE", f"/api/customers/{customer_id}")

    # -------------------------
    # SETTINGS
    # -------------------------
    def get_upi_settings(self) -> dict:
        return self._request("GET", "/api/settings/upi")
