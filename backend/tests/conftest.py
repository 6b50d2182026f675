"""
Pytest configuration and fixtures for backend tests.

The remote restaurant API is replaced by an in-memory fake served through
httpx.MockTransport; tokens are signed with the test secret.
"""

import copy
import os
import tempfile

# Must be set before any application module reads settings
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("REMOTE_API_URL", "http://remote.test/api")
os.environ.setdefault("LOG_DIRECTORY", tempfile.mkdtemp(prefix="restaurant-admin-logs-"))

from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from clients.restaurant_api import RestaurantApiClient
from core.dependencies import get_api_client, get_print_backend, get_wizard_store
from core.security import SessionContext, create_access_token
from services.print_service import SpoolPrintBackend
from services.report_service import build_daily_report
from services.wizard_service import WizardStore

REMOTE_BASE_URL = "http://remote.test/api"
BRANCH = "dhanmondi"
REPORT_DATE = date(2026, 10, 19)


class FakeRemote:
    """Canned responses keyed by (method, path), plus a log of what was sent."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, body=None, status_code=200):
        self.routes[(method, path)] = (status_code, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        self.requests.append(request)

        if (request.method, path) not in self.routes:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        status_code, body = self.routes[(request.method, path)]
        if isinstance(body, Exception):
            raise body
        if callable(body):
            return body(request)
        return httpx.Response(status_code, json=body)

    def sent(self, method, path):
        """Requests sent to one route, oldest first."""
        return [
            r for r in self.requests
            if r.method == method and r.url.path == f"/api{path}"
        ]


def make_token(role="admin", user_id="u-admin", branch=BRANCH, **claims):
    return create_access_token({"sub": user_id, "role": role, "branch": branch, **claims})


def make_context(role="admin", user_id="u-admin", branch=BRANCH):
    return SessionContext(user_id=user_id, role=role, branch=branch, token=make_token(role, user_id, branch))


# Remote API payloads
DAY_RESPONSE = {
    "summary": {
        "totalAmount": 1000,
        "totalDiscount": 100,
        "totalTableDiscount": 20,
        "totalComplimentaryAmount": 80,
        "totalVat": 75,
        "totalSd": 0,
        "cashPayments": 600,
        "cardPayments": 300,
        "mobilePayments": 100,
        "bankPayments": 0,
        "totalGuestCount": 5,
        "totalOrders": 2,
        "totalQty": 5,
        "salesByOrderType": {"dine-in": 700, "takeaway": 300, "delivery": 0},
        "salesByDeliveryProvider": {"pathao": 0, "foodpanda": 0},
    },
    "orders": [
        {
            "invoiceSerial": "INV-001",
            "dateTime": "2026-10-19T09:05:00.000Z",
            "orderType": "dine-in",
            "tableName": "T-1",
            "products": [
                {"productName": "Kacchi Biryani", "qty": 2, "rate": 350, "subtotal": 700},
                {"productName": "Borhani", "qty": 1, "rate": 80, "subtotal": 0, "isComplimentary": True},
            ],
            "discount": 50,
            "vat": 50,
            "totalAmount": 700,
            "totalSale": 700,
            "paymentMethod": "Cash",
            "loginUserName": "Rahim",
        },
        {
            "invoiceSerial": "INV-002",
            "dateTime": "2026-10-19T12:30:00.000Z",
            "orderType": "takeaway",
            "products": [
                {"productName": "Chicken Roll", "qty": 2, "rate": 150, "subtotal": 300},
            ],
            "totalAmount": 300,
            "totalSale": 300,
            "paymentMethod": "Visa Card",
        },
    ],
}

COMPANY_RESPONSE = [
    {
        "name": "Kacchi House",
        "branch": BRANCH,
        "address": "Road 27, Dhanmondi",
        "phone": "01700000000",
        "email": "info@kacchihouse.com",
        "binNumber": "BIN-123",
    }
]

BRANCH_USERS = [
    {"_id": "u-admin", "name": "Ayesha Admin", "email": "admin@kacchihouse.com", "role": "admin", "password": "hashed"},
    {"_id": "u-manager", "name": "Karim Manager", "email": "manager@kacchihouse.com", "role": "manager"},
    {"_id": "u-manager-2", "name": "Nadia Manager", "email": "nadia@kacchihouse.com", "role": "manager"},
    {"_id": "u-cashier", "name": "Rahim Cashier", "email": "rahim@kacchihouse.com", "role": "cashier"},
]

BRANCH_ROLES = [{"userrole": "admin"}, {"userrole": "manager"}, {"userrole": "user"}, {"userrole": "cashier"}]


@pytest.fixture
def day_response():
    return copy.deepcopy(DAY_RESPONSE)


@pytest.fixture
def company_response():
    return copy.deepcopy(COMPANY_RESPONSE)


@pytest.fixture
def report(day_response, company_response):
    """Daily report built from the canned day."""
    return build_daily_report(day_response, company_response[0], REPORT_DATE)


@pytest.fixture
def remote(day_response, company_response):
    """Fake remote API with the canned day, company and branch users."""
    fake = FakeRemote()
    fake.add("GET", f"/invoice/{BRANCH}/date/{REPORT_DATE.isoformat()}", day_response)
    fake.add("GET", f"/company/branch/{BRANCH}/", company_response)
    fake.add("GET", f"/user/{BRANCH}/get-all/", copy.deepcopy(BRANCH_USERS))
    fake.add("GET", f"/userrole/branch/{BRANCH}", copy.deepcopy(BRANCH_ROLES))
    return fake


@pytest.fixture
def api_client(remote):
    client = RestaurantApiClient(base_url=REMOTE_BASE_URL, transport=httpx.MockTransport(remote.handler))
    yield client
    client.close()


@pytest.fixture
def wizard_store():
    return WizardStore()


@pytest.fixture
def spool_dir(tmp_path):
    return tmp_path / "spool"


@pytest.fixture
def client(api_client, wizard_store, spool_dir):
    """
    Create a test client wired to the fake remote API.
    """
    app.dependency_overrides[get_api_client] = lambda: api_client
    app.dependency_overrides[get_wizard_store] = lambda: wizard_store
    app.dependency_overrides[get_print_backend] = lambda: SpoolPrintBackend(str(spool_dir), ttl_seconds=300)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token('admin', 'u-admin')}"}


@pytest.fixture
def manager_headers():
    return {"Authorization": f"Bearer {make_token('manager', 'u-manager')}"}


@pytest.fixture
def superadmin_headers():
    return {"Authorization": f"Bearer {make_token('superadmin', 'u-root')}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token('user', 'u-cashier')}"}
