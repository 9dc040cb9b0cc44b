import logging
import httpx
from pydantic import BaseModel, ValidationError
from typing import Optional, List, Type

from storefront.core.config import settings
from storefront.schemas.auth import LoginRequest, LoginResult
from storefront.schemas.cart import CartLine
from storefront.schemas.order import OrderDraft, OrderSummary
from storefront.schemas.payment import PaymentDetails

logger = logging.getLogger(__name__)

SUCCESS = "success"


class BackendError(Exception):
    """The shop API rejected a request or answered without the success marker."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(BackendError):
    """The shop API could not be reached."""


class ShopAPIClient:
    """HTTP client for the remote shop API (cart, orders, payments, login)."""

    def __init__(self, base_url: str = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=settings.API_TIMEOUT_SECONDS,
                transport=self.transport
            )
        return self.client

    @staticmethod
    def _auth_headers(token: Optional[str]) -> dict:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> dict:
        """
        Send a request and return the decoded JSON body.

        Raises TransportError when the API is unreachable and BackendError
        on a non-2xx answer or a body that is not a JSON object.
        """
        client = await self._get_client()
        headers = {**self._auth_headers(token), **kwargs.pop("headers", {})}
        url = f"{self.base_url}{path}"

        try:
            response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {path} failed with status {e.response.status_code}: {e.response.text}")
            raise BackendError(_error_message(e.response), status_code=e.response.status_code)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise TransportError(f"Could not reach shop API: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise BackendError(f"Shop API request failed: {str(e)}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"{method} {path} returned a non-JSON body: {response.text[:200]}")
            raise BackendError("Invalid response from shop API", status_code=response.status_code)

        if not isinstance(data, dict):
            logger.error(f"{method} {path} returned a non-object body: {response.text[:200]}")
            raise BackendError("Invalid response from shop API", status_code=response.status_code)
        return data

    def _expect_success(self, data: dict, action: str) -> dict:
        if data.get("status") != SUCCESS:
            logger.error(f"{action} rejected by shop API: {data}")
            raise BackendError(data.get("message") or f"Failed to {action}")
        return data

    async def login(self, email: str, password: str) -> LoginResult:
        """
        POST /login
        {"email": "customer@example.com", "password": "..."}

        Returns: {"token": "...", "CustomerID": 4}
        """
        credentials = LoginRequest(email=email, password=password)
        logger.info(f"Logging in {credentials.email}")
        data = await self._request("POST", "/login", json=credentials.model_dump())
        if not data.get("token"):
            raise BackendError(data.get("message") or "Login failed")
        return _parse(LoginResult, {"token": data["token"], "customer_id": data.get("CustomerID")}, "/login")

    async def get_cart(self, token: str) -> List[CartLine]:
        """GET /cart -> {"cart": [{"CartID": 1, "ProductID": 2, ...}]}"""
        data = await self._request("GET", "/cart", token=token)
        lines = _parse_rows(CartLine, data.get("cart"), "/cart")
        logger.info(f"Fetched cart: {len(lines)} lines")
        return lines

    async def delete_cart_line(self, token: str, cart_id: int) -> None:
        data = await self._request("DELETE", f"/cart/{cart_id}", token=token)
        self._expect_success(data, "remove item")
        logger.info(f"Removed cart line {cart_id}")

    async def clear_cart(self, token: str) -> None:
        data = await self._request("DELETE", "/cart", token=token)
        self._expect_success(data, "clear cart")
        logger.info("Cart cleared")

    async def create_order(self, token: str, draft: OrderDraft, idempotency_key: Optional[str] = None) -> int:
        """
        Create order on the shop API.

        POST /orders
        {"CustomerID": 4, "TotalPrice": 250.0, "Status": "Pending"}

        Returns the new OrderID from {"status": "success", "OrderID": 123}.
        """
        headers = {}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        payload = draft.to_payload()
        logger.info(f"Creating order for customer {draft.customer_id}, total {draft.total_price}")
        logger.debug(f"Order payload: {payload}")

        data = await self._request("POST", "/orders", token=token, json=payload, headers=headers)
        self._expect_success(data, "create order")

        try:
            order_id = int(data["OrderID"])
        except (KeyError, TypeError, ValueError):
            logger.error(f"Order response without a usable OrderID: {data}")
            raise BackendError("Order created without an OrderID")

        logger.info(f"Order created successfully: {order_id}")
        return order_id

    async def get_customer_orders(self, token: str, customer_id: int) -> List[OrderSummary]:
        """GET /orders/{customerId} -> {"orders": [{"OrderID": 1, "OrderDate": "..."}]}"""
        data = await self._request("GET", f"/orders/{customer_id}", token=token)
        return _parse_rows(OrderSummary, data.get("orders"), f"/orders/{customer_id}")

    async def get_payment(self, token: str, order_id: int) -> Optional[PaymentDetails]:
        """GET /payments/{orderId}. Returns None when no payment exists for the order."""
        data = await self._request("GET", f"/payments/{order_id}", token=token)
        if not data.get("OrderID"):
            return None
        return _parse(PaymentDetails, data, f"/payments/{order_id}")

    async def close(self):
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None


def _parse(model: Type[BaseModel], data: dict, path: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{path} returned an unexpected {model.__name__}: {e}")
        raise BackendError("Invalid response from shop API")


def _parse_rows(model: Type[BaseModel], rows, path: str) -> list:
    if rows is None:
        return []
    if not isinstance(rows, list):
        logger.error(f"{path} returned {type(rows).__name__} where a list was expected")
        raise BackendError("Invalid response from shop API")
    return [_parse(model, row, path) for row in rows]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"HTTP {response.status_code}"


# Global instance
api_client = ShopAPIClient()
