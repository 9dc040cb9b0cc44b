from pathlib import Path
from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from typing import Optional
from urllib.parse import urlsplit
import logging

from storefront.core.api_client import ShopAPIClient, BackendError, TransportError, api_client
from storefront.core.config import settings
from storefront.services.cart import build_cart_view
from storefront.services.checkout import checkout, CheckoutStatus

logger = logging.getLogger(__name__)
router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

PAYMENT_STATUS_BADGES = {
    "Completed": "bg-success",
    "Pending": "bg-warning text-dark",
}


def get_api_client() -> ShopAPIClient:
    return api_client


def get_token(request: Request) -> Optional[str]:
    return request.session.get("access_token")


def flash(request: Request, text: str, kind: str = "danger"):
    request.session["flash"] = {"kind": kind, "text": text}


def local_path(url: str) -> str:
    """Only same-site paths; browsers read `//host` and `/\\host` as another host."""
    parts = urlsplit(url)
    if parts.scheme or parts.netloc or not url.startswith("/") or url[1:2] in ("/", "\\"):
        return "/"
    return url


def login_redirect(next_url: str) -> RedirectResponse:
    return RedirectResponse(url=f"/login?next={next_url}", status_code=303)


def payment_badge(status: Optional[str]) -> str:
    return PAYMENT_STATUS_BADGES.get(status, "bg-secondary")


def money(amount) -> str:
    if amount is None:
        return "-"
    return f"{amount:,.2f}"


templates.env.globals["payment_badge"] = payment_badge
templates.env.filters["money"] = money


# Helper to get common data for all templates
def get_base_context(request: Request) -> dict:
    return {
        "shop_name": settings.SHOP_NAME,
        "currency": settings.CURRENCY_LABEL,
        "logged_in": bool(get_token(request)),
        "flash": request.session.pop("flash", None)
    }


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "home.html", get_base_context(request))


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str = "/"):
    return templates.TemplateResponse(request, "login.html", {
        **get_base_context(request),
        "next": next
    })


@router.post("/login", response_class=HTMLResponse)
async def login_post(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next: str = Form("/"),
    client: ShopAPIClient = Depends(get_api_client)
):
    error = None
    try:
        result = await client.login(email, password)
    except ValidationError:
        error = "Please enter a valid email address."
    except BackendError as e:
        # Server-supplied reason when there is one, generic text when unreachable
        error = "Login failed. Try again." if isinstance(e, TransportError) else e.message

    if error:
        return templates.TemplateResponse(request, "login.html", {
            **get_base_context(request),
            "error": error,
            "email": email,
            "next": next
        })

    request.session["access_token"] = result.token
    if result.customer_id is not None:
        request.session["customer_id"] = result.customer_id
    logger.info(f"Customer logged in: {email}")

    return RedirectResponse(url=local_path(next), status_code=303)


@router.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url="/", status_code=303)


@router.get("/cart", response_class=HTMLResponse)
async def view_cart(request: Request, client: ShopAPIClient = Depends(get_api_client)):
    token = get_token(request)
    if not token:
        return login_redirect("/cart")

    context = get_base_context(request)
    lines = []
    try:
        lines = await client.get_cart(token)
        if not lines:
            context["error"] = "No items in cart."
    except BackendError as e:
        logger.error(f"Fetch cart error: {e.message}")
        context["error"] = "Failed to fetch cart items."

    return templates.TemplateResponse(request, "cart.html", {
        **context,
        "cart": build_cart_view(lines)
    })


@router.post("/cart/{cart_id}/delete")
async def delete_cart_line(request: Request, cart_id: int, client: ShopAPIClient = Depends(get_api_client)):
    token = get_token(request)
    if not token:
        return login_redirect("/cart")

    try:
        await client.delete_cart_line(token, cart_id)
        flash(request, "Item removed from cart!", "success")
    except BackendError as e:
        logger.error(f"Delete cart error: {e.message}")
        flash(request, "Error removing item from cart.")

    return RedirectResponse(url="/cart", status_code=303)


@router.post("/cart/clear")
async def clear_cart(request: Request, client: ShopAPIClient = Depends(get_api_client)):
    token = get_token(request)
    if not token:
        return login_redirect("/cart")

    try:
        await client.clear_cart(token)
        flash(request, "All items removed from cart!", "success")
    except BackendError as e:
        logger.error(f"Remove all error: {e.message}")
        flash(request, "Error removing all items.")

    return RedirectResponse(url="/cart", status_code=303)


@router.post("/checkout")
async def checkout_post(request: Request, client: ShopAPIClient = Depends(get_api_client)):
    token = get_token(request)
    if not token:
        return login_redirect("/cart")

    try:
        lines = await client.get_cart(token)
    except BackendError as e:
        logger.error(f"Checkout error: {e.message}")
        flash(request, "Error during checkout.")
        return RedirectResponse(url="/cart", status_code=303)

    result = await checkout(client, lines, token, customer_id=request.session.get("customer_id"))

    if result.ok:
        flash(request, result.message, "success")
        return RedirectResponse(url=result.redirect_url, status_code=303)

    kind = "warning" if result.status == CheckoutStatus.CART_CLEAR_FAILED else "danger"
    flash(request, result.message, kind)
    return RedirectResponse(url="/cart", status_code=303)


@router.get("/orders", response_class=HTMLResponse)
async def order_history(
    request: Request,
    id: Optional[int] = None,
    client: ShopAPIClient = Depends(get_api_client)
):
    token = get_token(request)
    if not token:
        return login_redirect("/orders")

    context = get_base_context(request)
    orders = []
    customer_id = request.session.get("customer_id", settings.DEFAULT_CUSTOMER_ID)
    try:
        orders = await client.get_customer_orders(token, customer_id)
        if not orders:
            context["error"] = "No orders found."
    except BackendError as e:
        logger.error(f"Fetch orders error: {e.message}")
        context["error"] = "Failed to fetch orders."

    return templates.TemplateResponse(request, "orders.html", {
        **context,
        "orders": orders,
        "highlight_id": id
    })


@router.get("/payments", response_class=HTMLResponse)
async def payment_history(
    request: Request,
    order_id: Optional[str] = None,
    client: ShopAPIClient = Depends(get_api_client)
):
    token = get_token(request)
    if not token:
        return login_redirect("/payments")

    context = get_base_context(request)
    orders = []
    payment = None
    customer_id = request.session.get("customer_id", settings.DEFAULT_CUSTOMER_ID)

    try:
        orders = await client.get_customer_orders(token, customer_id)
        if not orders:
            context["error"] = "No orders found."
    except BackendError as e:
        logger.error(f"Fetch orders error: {e.message}")
        context["error"] = "Failed to fetch orders."

    # Empty selection ("-- Select Order --") loads nothing
    selected_id = None
    if order_id and order_id.strip().isdigit():
        selected_id = int(order_id)

    if selected_id is not None:
        try:
            payment = await client.get_payment(token, selected_id)
            if payment is None:
                context.setdefault("error", "No payment found for this order.")
        except BackendError as e:
            logger.error(f"Fetch payment error: {e.message}")
            context.setdefault("error", "Failed to fetch payment details.")

    return templates.TemplateResponse(request, "payments.html", {
        **context,
        "orders": orders,
        "selected_id": selected_id,
        "payment": payment
    })
