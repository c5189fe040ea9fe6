"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from dispatch.config import get_settings
from dispatch.domain import dispatch
from dispatch.order.order import CustomerSnapshot, DeliveryAddress, Order
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Order")
class PlaceOrder:
    """Place a new order for a customer."""

    customer_id = Identifier(required=True)
    customer_name = String(max_length=150)
    customer_email = String(max_length=254)
    customer_phone = String(max_length=20)
    full_address = String(required=True, max_length=500)
    landmark = String(max_length=200)
    pincode = String(max_length=10)
    items = Text(required=True)  # JSON list of item dicts
    delivery_fee = Float()
    taxes = Float(default=0.0)
    payment_method = String(max_length=50)
    payment_status = String(max_length=20)
    notes = Text()


@dispatch.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        settings = get_settings()
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        delivery_fee = command.delivery_fee if command.delivery_fee is not None else settings.standard_delivery_fee

        order = Order.place(
            customer=CustomerSnapshot(
                customer_id=command.customer_id,
                name=command.customer_name,
                email=command.customer_email,
                phone=command.customer_phone,
            ),
            address=DeliveryAddress(
                full_address=command.full_address,
                landmark=command.landmark,
                pincode=command.pincode,
            ),
            items_data=items_data,
            delivery_fee=delivery_fee,
            taxes=command.taxes or 0.0,
            payment_method=command.payment_method,
            payment_status=command.payment_status,
            notes=command.notes,
            order_number_prefix=settings.order_number_prefix,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=order.total,
        )
        return str(order.id)
