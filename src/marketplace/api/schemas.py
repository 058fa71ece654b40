"""Pydantic request/response schemas for the marketplace API.

These are external contracts, kept separate from the Protean commands they
are translated into.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    quantity: int = Field(ge=1, strict=True)

    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "prod-001", "quantity": 2}],
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1, strict=True)


# ---------------------------------------------------------------------------
# Checkout and orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    referral_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("referral_code", "referralCode"),
    )


class CheckoutResponse(BaseModel):
    order_id: str
    order_number: str
    total: float
    status: str


class UpdateOrderStatusRequest(BaseModel):
    # Membership is checked by the domain so unknown values share its error
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Vendor products
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Handmade mug", "price": 18.5, "stock_quantity": 12}],
        }
    }


class UpdateProductRequest(BaseModel):
    price: float | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ProductIdResponse(BaseModel):
    product_id: str


# ---------------------------------------------------------------------------
# Referrals
# ---------------------------------------------------------------------------
class CreateReferralLinkRequest(BaseModel):
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    discount_percent: float = Field(
        default=0.0,
        ge=0,
        le=90,
        validation_alias=AliasChoices("discount_percent", "discountPercent"),
    )
    expires_at: datetime | None = Field(default=None, validation_alias=AliasChoices("expires_at", "expiresAt"))


class ReferralLinkResponse(BaseModel):
    code: str
    share_path: str


class ReviewEligibilityResponse(BaseModel):
    eligible: bool
