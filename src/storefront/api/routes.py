"""FastAPI routes for the Storefront: catalog, cart, checkout and orders."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddressSchema,
    AddToCartRequest,
    ApplyCouponRequest,
    CartLineResponse,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    CouponResponse,
    OrderListResponse,
    OrderLookupRequest,
    OrderResponse,
    OrderStatusResponse,
    OrderSummaryResponse,
    PreviewResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductResponse,
    PurgeResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from storefront.api.session import session_id
from storefront.cart.cart import ShoppingCart
from storefront.cart.coupons import apply_coupon
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import PurgeExpiredCarts
from storefront.catalog.product import Product
from storefront.catalog.repository import ProductFilter
from storefront.checkout.placement import checkout, preview_order
from storefront.order.lifecycle import AdvanceOrderStatus, CancelOrder
from storefront.order.queries import find_orders_by_email, get_order, order_summary

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def _product(product) -> ProductResponse:
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        category=product.category,
        image=product.image,
        stock=product.stock,
        featured=bool(product.featured),
        in_stock=product.is_available(),
    )


def _cart_line(line) -> CartLineResponse:
    return CartLineResponse(
        product_id=str(line.product_id),
        name=line.name,
        price=line.price,
        image=line.image,
        quantity=line.quantity,
        max_stock=line.max_stock,
        line_total=line.line_total(),
    )


def _cart(token, cart) -> CartResponse:
    if cart is None:
        cart = ShoppingCart.start(token)
    totals = cart.totals()
    return CartResponse(
        session_id=token,
        lines=[_cart_line(line) for line in cart.ordered_lines()],
        item_count=cart.item_count(),
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        tax=totals.tax,
        total=totals.total,
        coupon_code=cart.discount.code if cart.discount else None,
        discount_value=cart.discount.value if cart.discount else 0.0,
    )


def _order(order) -> OrderResponse:
    address = order.shipping_address
    return OrderResponse(
        order_id=order.order_id,
        customer_email=order.customer_email,
        customer_name=order.customer_name,
        items=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "subtotal": line.subtotal,
            }
            for line in order.items
        ],
        item_count=order.item_count(),
        subtotal=order.subtotal,
        shipping=order.shipping,
        tax=order.tax,
        discount=order.discount,
        discount_code=order.discount_code,
        total=order.total,
        payment_method=order.payment_method,
        shipping_address=(
            AddressSchema(
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
                country=address.country,
            )
            if address
            else None
        ),
        notes=order.notes,
        status=order.status,
        created_at=order.created_at.isoformat() if order.created_at else None,
        delivered_at=order.delivered_at.isoformat() if order.delivered_at else None,
    )


def _current_cart(token):
    return current_domain.repository_for(ShoppingCart).for_session(token)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
@product_router.get("", response_model=ProductListResponse)
async def list_products(
    category: str | None = None,
    search: str | None = None,
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    sort: str | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> ProductListResponse:
    criteria = ProductFilter.build(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        limit=limit,
    )
    products = current_domain.repository_for(Product).search(criteria)
    return ProductListResponse(products=[_product(p) for p in products], count=len(products))


@product_router.get("/featured", response_model=ProductListResponse)
async def featured_products() -> ProductListResponse:
    products = current_domain.repository_for(Product).featured()
    return ProductListResponse(products=[_product(p) for p in products], count=len(products))


@product_router.get("/{product_id}", response_model=ProductDetailResponse)
async def product_detail(product_id: str) -> ProductDetailResponse:
    repo = current_domain.repository_for(Product)
    product = repo.get_product(product_id)
    return ProductDetailResponse(
        product=_product(product),
        related=[_product(p) for p in repo.related(product)],
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@cart_router.get("", response_model=CartResponse)
async def view_cart(token: str = Depends(session_id)) -> CartResponse:
    return _cart(token, _current_cart(token))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, token: str = Depends(session_id)) -> CartResponse:
    command = AddToCart(session_id=token, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart(token, _current_cart(token))


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartQuantityRequest, token: str = Depends(session_id)
) -> CartResponse:
    command = UpdateCartQuantity(session_id=token, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart(token, _current_cart(token))


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(product_id: str, token: str = Depends(session_id)) -> StatusResponse:
    name = current_domain.process(RemoveFromCart(session_id=token, product_id=product_id), asynchronous=False)
    return StatusResponse(message=f"{name} removed from cart.")


@cart_router.post("/clear", response_model=StatusResponse)
async def clear_cart(token: str = Depends(session_id)) -> StatusResponse:
    current_domain.process(ClearCart(session_id=token), asynchronous=False)
    return StatusResponse(message="Cart cleared successfully.")


@cart_router.post("/coupon", response_model=CouponResponse)
async def apply_cart_coupon(body: ApplyCouponRequest, token: str = Depends(session_id)) -> CouponResponse:
    message = apply_coupon(token, body.coupon_code)
    cart = _current_cart(token)
    return CouponResponse(
        coupon_code=cart.discount.code if cart and cart.discount else None,
        message=message,
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@checkout_router.get("/preview", response_model=PreviewResponse)
async def checkout_preview(token: str = Depends(session_id)) -> PreviewResponse:
    preview = preview_order(token)
    pricing = preview["pricing"]
    return PreviewResponse(
        lines=[_cart_line(line) for line in preview["lines"]],
        item_count=preview["item_count"],
        subtotal=pricing.subtotal,
        shipping=pricing.shipping,
        tax=pricing.tax,
        discount=pricing.discount,
        total=pricing.total,
        coupon_code=preview["coupon_code"],
        discount_value=preview["discount_value"],
        message=preview["message"],
    )


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def place_order(body: CheckoutRequest, token: str = Depends(session_id)) -> CheckoutResponse:
    result = checkout(
        token,
        customer_email=body.customer_email,
        customer_name=body.customer_name,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        country=body.country,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return CheckoutResponse(**result)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.get("/summary", response_model=OrderSummaryResponse)
async def customer_order_summary(email: str) -> OrderSummaryResponse:
    return OrderSummaryResponse(**order_summary(email))


@order_router.post("/lookup", response_model=OrderListResponse)
async def lookup_orders(body: OrderLookupRequest) -> OrderListResponse:
    return OrderListResponse(orders=[_order(o) for o in find_orders_by_email(body.email)])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str) -> OrderResponse:
    return _order(get_order(order_id))


@order_router.post("/{order_id}/cancel", response_model=OrderStatusResponse)
async def cancel_order(order_id: str) -> OrderStatusResponse:
    status = current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusResponse:
    command = AdvanceOrderStatus(order_id=order_id, status=body.status)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------
@maintenance_router.post("/carts/purge", response_model=PurgeResponse)
async def purge_expired_carts() -> PurgeResponse:
    purged = current_domain.process(PurgeExpiredCarts(), asynchronous=False)
    return PurgeResponse(purged=purged)
