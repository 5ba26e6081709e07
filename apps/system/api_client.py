"""
Client for a remote PharmaPOS REST backend.

With ``PHARMAPOS_USE_MOCK`` on (the default) reads are served from the
static sample dataset and writes raise ``MockWriteNotSupported``. Otherwise
every call is a single JSON request with a bearer token; there is no retry.
"""
import logging

import requests
from django.conf import settings

from .mock_data import build_mock_data

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code, text):
        super().__init__(f"API error {status_code}: {text}")
        self.status_code = status_code
        self.text = text


class MockWriteNotSupported(Exception):
    pass


class PharmacyApiClient:
    def __init__(self, base_url=None, token=None, use_mock=None, timeout=None, session=None):
        self.base_url = (base_url or settings.PHARMAPOS_API_URL).rstrip("/")
        self.token = token or ""
        self.use_mock = settings.PHARMAPOS_USE_MOCK if use_mock is None else use_mock
        self.timeout = timeout or settings.PHARMAPOS_API_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self):
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def _request(self, method, path, payload=None, params=None):
        url = f"{self.base_url}{path}"
        response = self.session.request(
            method,
            url,
            json=payload,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not response.ok:
            logger.warning("%s %s failed with %s", method, url, response.status_code)
            raise ApiError(response.status_code, response.text)
        data = response.json()
        # List endpoints are paginated.
        if isinstance(data, dict) and "results" in data:
            return data["results"]
        return data

    def _mock(self, key):
        return build_mock_data()[key]

    def _refuse_mock_write(self, operation):
        if self.use_mock:
            raise MockWriteNotSupported(f"{operation}: mock write not supported")

    def get_medicines(self):
        if self.use_mock:
            return self._mock("medicines")
        return self._request("GET", "/medicines/")

    def create_medicine(self, data):
        self._refuse_mock_write("create_medicine")
        return self._request("POST", "/medicines/", payload=data)

    def get_batches(self, medicine_id=None):
        if self.use_mock:
            batches = self._mock("batches")
            if medicine_id is None:
                return batches
            return [batch for batch in batches if batch["medicine"] == medicine_id]
        params = {"medicine": medicine_id} if medicine_id is not None else None
        return self._request("GET", "/inventory/batches/", params=params)

    def get_sales(self):
        if self.use_mock:
            return self._mock("sales")
        return self._request("GET", "/sales/sales/")

    def create_sale(self, data):
        self._refuse_mock_write("create_sale")
        return self._request("POST", "/pos/checkout/", payload=data)

    def get_suppliers(self):
        if self.use_mock:
            return self._mock("suppliers")
        return self._request("GET", "/purchases/suppliers/")

    def get_customers(self):
        if self.use_mock:
            return self._mock("customers")
        return self._request("GET", "/sales/customers/")

    def get_purchases(self):
        if self.use_mock:
            return self._mock("purchases")
        return self._request("GET", "/purchases/orders/")
