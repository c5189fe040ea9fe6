"""Admin Query Facade — list and detail projections over the Order Store.

Reads are snapshots: filters, sorting and group-by counts are computed over
the live (not soft-deleted) orders at call time with no cross-order locking.
Query parameters are validated before storage is touched.
"""

import json
import math
from datetime import UTC, date, datetime
from typing import Literal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from dispatch.access import Principal, require_admin
from dispatch.config import get_settings
from dispatch.driver.driver import Driver
from dispatch.exceptions import MalformedInput, NotFound
from dispatch.order.lifecycle import OrderStatus, is_payment_status_label, is_status_label
from dispatch.order.order import Order
from dispatch.seller.seller import Seller

ALL = "ALL"
UNKNOWN = "Unknown"


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------
class OrderListQuery(BaseModel):
    model_config = ConfigDict(validate_default=True)

    status: str = ALL
    payment_status: str = ALL
    search: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    sort_by: Literal["recent", "amount", "status"] = "recent"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = 1
    limit: int | None = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: str) -> str:
        if value != ALL and not is_status_label(value):
            raise ValueError(f"Unknown order status: {value}")
        return value

    @field_validator("payment_status")
    @classmethod
    def _known_payment_status(cls, value: str) -> str:
        if value != ALL and not is_payment_status_label(value):
            raise ValueError(f"Unknown payment status: {value}")
        return value

    @field_validator("page")
    @classmethod
    def _positive_page(cls, value: int) -> int:
        if value < 1:
            raise ValueError("page must be at least 1")
        return value

    @field_validator("limit")
    @classmethod
    def _bounded_limit(cls, value: int | None) -> int:
        settings = get_settings()
        if value is None:
            return settings.default_page_size
        if not 1 <= value <= settings.max_page_size:
            raise ValueError(f"limit must be between 1 and {settings.max_page_size}")
        return value

    @model_validator(mode="after")
    def _ordered_dates(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self

    @classmethod
    def parse(cls, **params) -> "OrderListQuery":
        """Build a query from raw parameters, dropping the ones left unset."""
        try:
            return cls(**{k: v for k, v in params.items() if v is not None})
        except ValidationError as exc:
            raise MalformedInput(
                "Invalid order list parameters",
                errors=[f"{'.'.join(str(p) for p in e['loc']) or 'query'}: {e['msg']}" for e in exc.errors()],
            ) from None


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
class OrderSummary(BaseModel):
    id: str
    order_number: str
    customer_name: str
    customer_email: str | None = None
    item_count: int
    total: float
    status: str
    payment_status: str
    delivery_address: str | None = None
    created_at: datetime | None = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class OrderListResult(BaseModel):
    orders: list[OrderSummary]
    pagination: Pagination
    status_counts: dict[str, int]
    payment_status_counts: dict[str, int]


class CustomerInfo(BaseModel):
    id: str | None = None
    name: str
    email: str | None = None
    phone: str | None = None


class DriverInfo(BaseModel):
    id: str
    name: str
    phone: str | None = None


class AddressInfo(BaseModel):
    full_address: str | None = None
    landmark: str | None = None
    pincode: str | None = None


class OrderLine(BaseModel):
    product_name: str | None = None
    sku: str | None = None
    quantity: int
    price: float
    total: float
    image: str | None = None


class OrderDetail(BaseModel):
    id: str
    order_number: str
    status: str
    payment_status: str
    payment_method: str | None = None
    subtotal: float
    delivery_fee: float
    taxes: float
    total: float
    notes: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    delivered_at: datetime | None = None
    version: int
    customer: CustomerInfo
    seller_name: str
    driver: DriverInfo | None = None
    address: AddressInfo
    items: list[OrderLine]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def first_image(images: str | None) -> str | None:
    """First URL of a JSON image list; malformed data yields None."""
    if not images:
        return None
    try:
        urls = json.loads(images)
    except (TypeError, ValueError):
        return None
    if isinstance(urls, list) and urls and isinstance(urls[0], str):
        return urls[0]
    return None


def _customer_name(order: Order) -> str:
    return (order.customer.name if order.customer else None) or UNKNOWN


def _matches(order: Order, query: OrderListQuery) -> bool:
    if query.status != ALL and order.status != query.status:
        return False
    if query.payment_status != ALL and order.payment_status != query.payment_status:
        return False
    if query.date_from or query.date_to:
        if order.created_at is None:
            return False
        created = order.created_at.date()
        if query.date_from and created < query.date_from:
            return False
        if query.date_to and created > query.date_to:
            return False
    if query.search:
        needle = query.search.casefold()
        haystack = [order.order_number]
        if order.customer:
            haystack += [order.customer.name, order.customer.email]
        if not any(needle in value.casefold() for value in haystack if value):
            return False
    return True


_SORT_KEYS = {
    "recent": lambda o: o.created_at or datetime.min.replace(tzinfo=UTC),
    "amount": lambda o: o.total or 0.0,
    "status": lambda o: o.status,
}


def _summary(order: Order) -> OrderSummary:
    return OrderSummary(
        id=str(order.id),
        order_number=order.order_number,
        customer_name=_customer_name(order),
        customer_email=order.customer.email if order.customer else None,
        item_count=len(order.items),
        total=order.total,
        status=order.status,
        payment_status=order.payment_status,
        delivery_address=order.address.full_address if order.address else None,
        created_at=order.created_at,
    )


def _counts(orders: list[Order], attribute: str) -> dict[str, int]:
    counts: dict[str, int] = {}
    for order in orders:
        label = getattr(order, attribute)
        counts[label] = counts.get(label, 0) + 1
    return counts


def _seller_name(order: Order) -> str:
    seller_id = order.items[0].seller_id if order.items else None
    if not seller_id:
        return UNKNOWN
    try:
        seller = current_domain.repository_for(Seller).get(seller_id)
    except ObjectNotFoundError:
        return UNKNOWN
    return seller.display_name


def _driver_info(order: Order) -> DriverInfo | None:
    if not order.driver_id:
        return None
    try:
        driver = current_domain.repository_for(Driver).find(order.driver_id)
    except NotFound:
        return None
    return DriverInfo(id=str(driver.id), name=driver.name, phone=driver.phone)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def list_orders(principal: Principal, query: OrderListQuery | None = None) -> OrderListResult:
    require_admin(principal)
    query = query or OrderListQuery()

    live = current_domain.repository_for(Order).live_orders()
    matching = [o for o in live if _matches(o, query)]
    matching.sort(key=_SORT_KEYS[query.sort_by], reverse=query.sort_order == "desc")

    total = len(matching)
    start = (query.page - 1) * query.limit
    page = matching[start : start + query.limit]

    return OrderListResult(
        orders=[_summary(o) for o in page],
        pagination=Pagination(
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(total / query.limit),
        ),
        status_counts=_counts(live, "status"),
        payment_status_counts=_counts(live, "payment_status"),
    )


def get_order_details(principal: Principal, order_id: str) -> OrderDetail:
    require_admin(principal)
    order = current_domain.repository_for(Order).find_live(order_id)

    cancellation_reason = None
    if order.status == OrderStatus.CANCELLED.value:
        cancellation_reason = order.notes or "Cancelled"

    customer = order.customer
    address = order.address
    return OrderDetail(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        taxes=order.taxes,
        total=order.total,
        notes=order.notes,
        cancellation_reason=cancellation_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
        delivered_at=order.delivered_at,
        version=order.version,
        customer=CustomerInfo(
            id=str(customer.customer_id) if customer else None,
            name=_customer_name(order),
            email=customer.email if customer else None,
            phone=customer.phone if customer else None,
        ),
        seller_name=_seller_name(order),
        driver=_driver_info(order),
        address=AddressInfo(
            full_address=address.full_address if address else None,
            landmark=address.landmark if address else None,
            pincode=address.pincode if address else None,
        ),
        items=[
            OrderLine(
                product_name=item.product_name,
                sku=item.sku,
                quantity=item.quantity,
                price=item.unit_price,
                total=item.total_price,
                image=first_image(item.images),
            )
            for item in order.items
        ],
    )
