"""FastAPI routes for the marketplace — carts, checkout, orders and referrals."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Header, Query
from protean.utils.globals import current_domain

from marketplace.access import Actor
from marketplace.api.dependencies import admin, customer, vendor, vendor_or_admin
from marketplace.api.schemas import (
    AddCartItemRequest,
    CheckoutRequest,
    CheckoutResponse,
    CreateProductRequest,
    CreateReferralLinkRequest,
    ProductIdResponse,
    ReferralLinkResponse,
    ReviewEligibilityResponse,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from marketplace.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.views import cart_view
from marketplace.catalogue.listing import ListProduct, UpdateProduct
from marketplace.checkout.orchestrator import checkout
from marketplace.order import views as order_views
from marketplace.order.status import UpdateOrderStatus
from marketplace.referral.creation import CreateReferralLink
from marketplace.referral.link import share_path
from marketplace.referral.tracker import ReferralTracker


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(actor: Actor = Depends(customer)):
    return cart_view(actor.id)


@cart_router.post("/items", status_code=201, response_model=StatusResponse)
async def add_cart_item(body: AddCartItemRequest, actor: Actor = Depends(customer)) -> StatusResponse:
    command = AddToCart(
        customer_id=actor.id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/items/{product_id}", response_model=StatusResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, actor: Actor = Depends(customer)
) -> StatusResponse:
    command = UpdateCartQuantity(
        customer_id=actor.id,
        product_id=product_id,
        new_quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(product_id: str, actor: Actor = Depends(customer)) -> StatusResponse:
    current_domain.process(RemoveFromCart(customer_id=actor.id, product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def place_order(body: CheckoutRequest | None = None, actor: Actor = Depends(customer)) -> CheckoutResponse:
    referral_code = body.referral_code if body else None
    summary = checkout(actor.id, referral_code=referral_code)
    return CheckoutResponse(**summary.to_dict())


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=5, ge=1),
    search: str = "",
    actor: Actor = Depends(customer),
):
    return order_views.customer_orders(actor.id, page=page, limit=limit, search=search)


@order_router.get("/{order_id}")
async def get_order(order_id: str, actor: Actor = Depends(customer)):
    return order_views.customer_order(actor.id, order_id)


@order_router.patch("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, actor: Actor = Depends(vendor_or_admin)
) -> StatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        actor_id=actor.id,
        actor_role=actor.role.value,
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


# ---------------------------------------------------------------------------
# Vendor Router
# ---------------------------------------------------------------------------
vendor_router = APIRouter(prefix="/vendor", tags=["vendor"])


@vendor_router.get("/orders")
async def list_vendor_orders(actor: Actor = Depends(vendor)):
    return order_views.vendor_orders(actor.id)


@vendor_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def list_product(body: CreateProductRequest, actor: Actor = Depends(vendor)) -> ProductIdResponse:
    command = ListProduct(
        vendor_id=actor.id,
        name=body.name,
        price=body.price,
        stock_quantity=body.stock_quantity,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@vendor_router.patch("/products/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str, body: UpdateProductRequest, actor: Actor = Depends(vendor)
) -> StatusResponse:
    command = UpdateProduct(
        vendor_id=actor.id,
        product_id=product_id,
        price=body.price,
        stock_quantity=body.stock_quantity,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@vendor_router.post("/referrals/links", status_code=201, response_model=ReferralLinkResponse)
async def create_referral_link(
    body: CreateReferralLinkRequest, actor: Actor = Depends(vendor)
) -> ReferralLinkResponse:
    command = CreateReferralLink(
        vendor_id=actor.id,
        product_id=body.product_id,
        discount_percent=body.discount_percent,
        expires_at=_as_utc(body.expires_at),
    )
    code = current_domain.process(command, asynchronous=False)
    return ReferralLinkResponse(code=code, share_path=share_path(code))


@vendor_router.get("/referrals/analytics")
async def referral_analytics(
    since: datetime | None = Query(default=None, alias="from"),
    until: datetime | None = Query(default=None, alias="to"),
    actor: Actor = Depends(vendor),
):
    return ReferralTracker().performance(actor.id, since=_as_utc(since), until=_as_utc(until))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders")
async def list_all_orders(actor: Actor = Depends(admin)):
    return order_views.all_orders()


# ---------------------------------------------------------------------------
# Referral Router (public)
# ---------------------------------------------------------------------------
referral_router = APIRouter(prefix="/referrals", tags=["referrals"])


@referral_router.get("/{code}")
async def open_referral(
    code: str,
    x_session_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    return ReferralTracker().record_click(code, customer_id=x_user_id, session_id=x_session_id)


@referral_router.post("/{code}/view", response_model=StatusResponse)
async def view_referral(
    code: str,
    x_session_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    ReferralTracker().record_view(code, customer_id=x_user_id, session_id=x_session_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Review eligibility
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.get("/eligibility/{product_id}", response_model=ReviewEligibilityResponse)
async def review_eligibility(product_id: str, actor: Actor = Depends(customer)) -> ReviewEligibilityResponse:
    return ReviewEligibilityResponse(eligible=order_views.can_review(actor.id, product_id))
