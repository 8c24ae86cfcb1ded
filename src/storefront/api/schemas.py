"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    product_id: str
    name: str
    description: str
    price: float
    category: str
    image: str | None = None
    stock: int
    featured: bool = False
    in_stock: bool


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    count: int


class ProductDetailResponse(BaseModel):
    product: ProductResponse
    related: list[ProductResponse]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "3f0c9a52-5d8e-4a61-b0f4-7b2d8e0e1a11",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


class ApplyCouponRequest(BaseModel):
    coupon_code: str | None = Field(default=None, max_length=100)


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    price: float
    image: str | None = None
    quantity: int
    max_stock: int | None = None
    line_total: float


class CartResponse(BaseModel):
    session_id: str
    lines: list[CartLineResponse]
    item_count: int
    subtotal: float
    shipping: float
    tax: float
    total: float
    coupon_code: str | None = None
    discount_value: float = 0.0


class CouponResponse(BaseModel):
    coupon_code: str | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class PreviewResponse(BaseModel):
    lines: list[CartLineResponse]
    item_count: int
    subtotal: float
    shipping: float
    tax: float
    discount: float
    total: float
    coupon_code: str | None = None
    discount_value: float = 0.0
    message: str | None = None


class CheckoutRequest(BaseModel):
    customer_email: str
    customer_name: str
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    payment_method: str = "Credit Card"
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_email": "jane@example.com",
                    "customer_name": "Jane Doe",
                    "street": "42 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "country": "USA",
                    "payment_method": "PayPal",
                    "notes": "Leave at the door",
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    order_id: str
    total: float


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    order_id: str
    customer_email: str
    customer_name: str
    items: list[OrderLineResponse]
    item_count: int
    subtotal: float
    shipping: float
    tax: float
    discount: float
    discount_code: str | None = None
    total: float
    payment_method: str
    shipping_address: AddressSchema | None = None
    notes: str | None = None
    status: str
    created_at: str | None = None
    delivered_at: str | None = None


class OrderLookupRequest(BaseModel):
    email: str


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class OrderSummaryResponse(BaseModel):
    total_orders: int
    total_spent: float
    pending_orders: int
    delivered_orders: int


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None


class PurgeResponse(BaseModel):
    purged: int
