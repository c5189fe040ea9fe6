"""Order aggregate (CQRS) — the Order Store's unit of consistency.

Status and payment status are independent axes. Status moves are decided by
``dispatch.order.lifecycle``; this aggregate applies the decision and keeps
the stored fields consistent with it. Every mutation bumps ``updated_at``;
``version`` is the persisted aggregate version Protean checks on every save.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from dispatch.domain import dispatch
from dispatch.exceptions import Conflict, IllegalTransition, MalformedInput, NotFound
from dispatch.order.events import DriverAssigned, OrderDeleted, OrderPlaced, OrderStatusChanged
from dispatch.order.lifecycle import (
    OrderStatus,
    PaymentStatus,
    TransitionDecision,
    apply_side_effects,
    decide_transition,
    is_status_label,
)


def generate_order_number(prefix: str, now: datetime) -> str:
    return f"{prefix}-{now:%Y%m%d}-{uuid4().hex[:6].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dispatch.value_object(part_of="Order")
class CustomerSnapshot:
    """Customer details copied onto the order when it is placed."""

    customer_id = Identifier(required=True)
    name = String(max_length=150)
    email = String(max_length=254)
    phone = String(max_length=20)


@dispatch.value_object(part_of="Order")
class DeliveryAddress:
    """Delivery address snapshot; never edited after placement."""

    full_address = String(required=True, max_length=500)
    landmark = String(max_length=200)
    pincode = String(max_length=10)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dispatch.entity(part_of="Order")
class OrderItem:
    """A line item referencing a product variant."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(max_length=255)
    sku = String(max_length=100)
    seller_id = Identifier()
    images = Text()  # JSON list of image URLs
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@dispatch.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(max_length=50)
    subtotal = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    taxes = Float(default=0.0)
    total = Float(default=0.0)
    customer = ValueObject(CustomerSnapshot)
    address = ValueObject(DeliveryAddress)
    driver_id = Identifier()
    items = HasMany(OrderItem)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()
    deleted_at = DateTime()

    @invariant.post
    def delivered_at_tracks_delivered_status(self):
        delivered = self.status == OrderStatus.DELIVERED.value
        if delivered != (self.delivered_at is not None):
            raise ValidationError({"delivered_at": ["delivered_at must be set exactly when the order is DELIVERED"]})

    @invariant.post
    def total_is_sum_of_components(self):
        expected = round((self.subtotal or 0.0) + (self.delivery_fee or 0.0) + (self.taxes or 0.0), 2)
        if abs((self.total or 0.0) - expected) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal + delivery fee + taxes"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer: CustomerSnapshot,
        address: DeliveryAddress,
        items_data: list[dict],
        delivery_fee: float,
        taxes: float = 0.0,
        payment_method: str | None = None,
        payment_status: str | None = None,
        notes: str | None = None,
        order_number_prefix: str = "ORD",
    ):
        """Place a new order. Line totals, subtotal and total are computed here."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        lines = []
        for item_data in items_data:
            images = item_data.get("images")
            if isinstance(images, list):
                images = json.dumps(images)
            quantity = item_data["quantity"]
            unit_price = float(item_data["unit_price"])
            lines.append(
                {
                    **item_data,
                    "images": images,
                    "unit_price": unit_price,
                    "total_price": round(quantity * unit_price, 2),
                }
            )

        subtotal = round(sum(line["total_price"] for line in lines), 2)
        total = round(subtotal + delivery_fee + taxes, 2)

        order = cls(
            order_number=generate_order_number(order_number_prefix, now),
            status=OrderStatus.PENDING.value,
            payment_status=payment_status or PaymentStatus.PENDING.value,
            payment_method=payment_method,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            taxes=taxes,
            total=total,
            customer=customer,
            address=address,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(OrderItem(**line))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer.customer_id),
                item_count=len(lines),
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def version(self) -> int:
        """Version of the order as last persisted; -1 before the first save."""
        return self._version

    def assert_live(self) -> None:
        if self.is_deleted:
            raise NotFound("Order not found", order_id=str(self.id))

    def assert_version(self, expected_version: int | None) -> None:
        """Conditional write check: the caller must have seen the latest version."""
        if expected_version is not None and expected_version != self.version:
            raise Conflict(
                "Order was modified concurrently; reload and retry",
                order_id=str(self.id),
                expected_version=expected_version,
                actual_version=self.version,
            )

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def change_status(
        self,
        status: str,
        force: bool = False,
        notes: str | None = None,
        cancellation_reason: str | None = None,
        changed_by: str | None = None,
    ) -> TransitionDecision:
        """Move the order to ``status``, strictly unless ``force`` is set."""
        if not is_status_label(status):
            raise MalformedInput(f"Unknown order status: {status}", order_id=str(self.id))

        decision = decide_transition(self.status, status, force=force)
        if not decision.allowed:
            raise IllegalTransition(
                f"Cannot transition from {decision.current.value} to {decision.requested.value}",
                order_id=str(self.id),
                current_status=decision.current.value,
                requested_status=decision.requested.value,
            )

        previous = self.status
        updates = apply_side_effects(self, decision.requested, notes=notes, cancellation_reason=cancellation_reason)
        with atomic_change(self):
            self.status = updates.status
            self.delivered_at = updates.delivered_at
            self.notes = updates.notes
            self.updated_at = updates.updated_at

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=updates.status,
                forced=decision.forced,
                changed_by=changed_by,
                changed_at=updates.updated_at,
            )
        )
        return decision

    # -------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------
    def assign_driver(self, driver_id: str) -> bool:
        """Rewrite the driver edge. Returns False when it already points at ``driver_id``."""
        if self.driver_id is not None and str(self.driver_id) == str(driver_id):
            return False

        now = datetime.now(UTC)
        previous = self.driver_id
        with atomic_change(self):
            self.driver_id = driver_id
            self.updated_at = now

        self.raise_(
            DriverAssigned(
                order_id=str(self.id),
                driver_id=str(driver_id),
                previous_driver_id=str(previous) if previous else None,
                assigned_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------
    def soft_delete(self) -> None:
        self.assert_live()
        now = datetime.now(UTC)
        with atomic_change(self):
            self.deleted_at = now
            self.updated_at = now
        self.raise_(OrderDeleted(order_id=str(self.id), deleted_at=now))
