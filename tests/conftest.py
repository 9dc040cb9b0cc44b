import os

os.environ.setdefault("API_BASE_URL", "http://shop.test/api")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

import httpx
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from storefront.core.api_client import ShopAPIClient
from storefront.schemas.cart import CartLine


API_BASE_URL = "http://shop.test/api"


class FakeShopAPI:
    """Canned responses for the remote shop API, recording every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method: str, path: str, status_code: int = 200, json=None, error: Exception = None):
        self.routes[(method, path)] = (status_code, json, error)

    def calls(self, method: str, path: str) -> list:
        return [r for r in self.requests if r.method == method and r.url.path == f"/api{path}"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        if (request.method, path) not in self.routes:
            return httpx.Response(404, json={"message": "Not found"})

        status_code, body, error = self.routes[(request.method, path)]
        if error is not None:
            raise error
        return httpx.Response(status_code, json=body)


@pytest.fixture
def shop_api():
    return FakeShopAPI()


@pytest.fixture
async def api(shop_api):
    client = ShopAPIClient(base_url=API_BASE_URL, transport=httpx.MockTransport(shop_api.handler))
    yield client
    await client.close()


@pytest.fixture
def cart_lines():
    return [
        CartLine(cart_id=1, product_id=10, product_name="Mug", unit_price=Decimal("100.00"), customer_id=4, quantity=2),
        CartLine(cart_id=2, product_id=11, product_name="Spoon", unit_price=Decimal("50.00"), customer_id=4, quantity=1),
    ]


@pytest.fixture
def cart_rows():
    return [
        {"CartID": 1, "ProductID": 10, "ProductName": "Mug", "Price": "100.00", "CustomerID": 4, "Quantity": 2},
        {"CartID": 2, "ProductID": 11, "ProductName": "Spoon", "Price": "50.00", "CustomerID": 4, "Quantity": 1},
    ]


@pytest.fixture
def web_client(shop_api):
    from storefront.main import app
    from storefront.web.routes import get_api_client

    client = ShopAPIClient(base_url=API_BASE_URL, transport=httpx.MockTransport(shop_api.handler))
    app.dependency_overrides[get_api_client] = lambda: client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(web_client, shop_api):
    shop_api.on("POST", "/login", json={"token": "tok-123", "CustomerID": 4})
    response = web_client.post(
        "/login",
        data={"email": "customer@example.com", "password": "secret"},
        follow_redirects=False
    )
    assert response.status_code == 303
    return web_client
