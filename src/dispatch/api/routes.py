"""FastAPI endpoints for the Dispatch domain."""

import json

from fastapi import APIRouter, Header, Response
from protean.utils.globals import current_domain

from dispatch.access import Principal, require_acting_driver, require_admin
from dispatch.admin.operations import delete_order, set_driver_verification, update_status
from dispatch.admin.queries import (
    OrderDetail,
    OrderListQuery,
    OrderListResult,
    get_order_details,
    list_orders,
)
from dispatch.api.schemas import (
    AssignDriverRequest,
    CompleteDeliveryRequest,
    DriverIdResponse,
    FulfillmentResponse,
    OrderIdResponse,
    OrderStatusResponse,
    PlaceOrderRequest,
    RegisterDriverRequest,
    RegisterSellerRequest,
    SellerIdResponse,
    SetVerificationRequest,
    StatusResponse,
    UpdateOrderStatusRequest,
)
from dispatch.assignment.service import AssignmentResult, CandidateDriver, assign, list_candidates
from dispatch.driver.driver import Driver
from dispatch.driver.presence import GoOffline, GoOnline
from dispatch.driver.registration import RegisterDriver, RemoveDriver
from dispatch.order.fulfillment import AcceptDelivery, CompleteDelivery, CompletePicking, StartPicking
from dispatch.order.locking import process_for_driver, process_for_order
from dispatch.order.placement import PlaceOrder
from dispatch.seller.seller import RegisterSeller

admin_router = APIRouter(prefix="/admin", tags=["admin"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
seller_router = APIRouter(prefix="/sellers", tags=["sellers"])
driver_router = APIRouter(prefix="/drivers", tags=["drivers"])


def _caller(user_id: str | None, role: str | None) -> Principal | None:
    return Principal(user_id=user_id, role=role) if user_id else None


def _principal(user_id: str | None, role: str | None) -> Principal:
    """Admin principal from the identity collaborator's headers, checked up front."""
    return require_admin(_caller(user_id, role))


def _acting_driver(driver_id: str, user_id: str | None, role: str | None, allow_admin: bool = False) -> Principal:
    """The caller must be the driver behind ``driver_id`` (or an admin, where allowed)."""
    driver = current_domain.repository_for(Driver).find(driver_id)
    return require_acting_driver(_caller(user_id, role), driver.user_id, driver.role, allow_admin=allow_admin)


# --- Admin endpoints ---


@admin_router.get("/orders", response_model=OrderListResult)
async def admin_list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    search: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> OrderListResult:
    principal = _principal(x_principal_id, x_principal_role)
    query = OrderListQuery.parse(
        status=status,
        payment_status=payment_status,
        search=search,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return list_orders(principal, query)


@admin_router.get("/orders/{order_id}", response_model=OrderDetail)
async def admin_order_details(
    order_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> OrderDetail:
    principal = _principal(x_principal_id, x_principal_role)
    return get_order_details(principal, order_id)


@admin_router.patch("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def admin_update_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> OrderStatusResponse:
    principal = _principal(x_principal_id, x_principal_role)
    result = update_status(
        principal,
        order_id,
        body.status,
        notes=body.notes,
        cancellation_reason=body.cancellation_reason,
        force=body.force,
        expected_version=body.expected_version,
    )
    return OrderStatusResponse(**result)


@admin_router.patch("/orders/{order_id}/driver", response_model=AssignmentResult)
async def admin_assign_driver(
    order_id: str,
    body: AssignDriverRequest,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> AssignmentResult:
    principal = _principal(x_principal_id, x_principal_role)
    return assign(principal, order_id, body.driver_id, expected_version=body.expected_version)


@admin_router.delete("/orders/{order_id}", status_code=204)
async def admin_delete_order(
    order_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> Response:
    principal = _principal(x_principal_id, x_principal_role)
    delete_order(principal, order_id)
    return Response(status_code=204)


@admin_router.get("/drivers/available", response_model=list[CandidateDriver])
async def admin_available_drivers(
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> list[CandidateDriver]:
    principal = _principal(x_principal_id, x_principal_role)
    return list_candidates(principal)


@admin_router.patch("/drivers/{driver_id}/verification", response_model=StatusResponse)
async def admin_set_verification(
    driver_id: str,
    body: SetVerificationRequest,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> StatusResponse:
    principal = _principal(x_principal_id, x_principal_role)
    set_driver_verification(principal, driver_id, body.status)
    return StatusResponse(status="verification_updated")


# --- Order endpoints ---


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        full_address=body.full_address,
        landmark=body.landmark,
        pincode=body.pincode,
        items=json.dumps([item.model_dump() for item in body.items]),
        delivery_fee=body.delivery_fee,
        taxes=body.taxes,
        payment_method=body.payment_method,
        payment_status=body.payment_status,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


# --- Seller endpoints ---


@seller_router.post("", status_code=201, response_model=SellerIdResponse)
async def register_seller(body: RegisterSellerRequest) -> SellerIdResponse:
    command = RegisterSeller(
        user_id=body.user_id,
        brand_name=body.brand_name,
        legal_business_name=body.legal_business_name,
    )
    result = current_domain.process(command, asynchronous=False)
    return SellerIdResponse(seller_id=result)


# --- Driver endpoints ---


@driver_router.post("", status_code=201, response_model=DriverIdResponse)
async def register_driver(body: RegisterDriverRequest) -> DriverIdResponse:
    command = RegisterDriver(
        user_id=body.user_id,
        name=body.name,
        phone=body.phone,
        role=body.role,
    )
    result = current_domain.process(command, asynchronous=False)
    return DriverIdResponse(driver_id=result)


@driver_router.delete("/{driver_id}", status_code=204)
async def remove_driver(
    driver_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> Response:
    _acting_driver(driver_id, x_principal_id, x_principal_role, allow_admin=True)
    process_for_driver(driver_id, RemoveDriver(driver_id=driver_id))
    return Response(status_code=204)


@driver_router.put("/{driver_id}/online", response_model=StatusResponse)
async def go_online(
    driver_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> StatusResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role, allow_admin=True)
    process_for_driver(driver_id, GoOnline(driver_id=driver_id))
    return StatusResponse(status="online")


@driver_router.put("/{driver_id}/offline", response_model=StatusResponse)
async def go_offline(
    driver_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> StatusResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role, allow_admin=True)
    process_for_driver(driver_id, GoOffline(driver_id=driver_id))
    return StatusResponse(status="offline")


@driver_router.put("/{driver_id}/orders/{order_id}/start-picking", response_model=FulfillmentResponse)
async def start_picking(
    driver_id: str,
    order_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> FulfillmentResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role)
    result = process_for_order(order_id, StartPicking(order_id=order_id, driver_id=driver_id))
    return FulfillmentResponse(**result)


@driver_router.put("/{driver_id}/orders/{order_id}/complete-picking", response_model=FulfillmentResponse)
async def complete_picking(
    driver_id: str,
    order_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> FulfillmentResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role)
    result = process_for_order(order_id, CompletePicking(order_id=order_id, driver_id=driver_id))
    return FulfillmentResponse(**result)


@driver_router.put("/{driver_id}/orders/{order_id}/accept", response_model=FulfillmentResponse)
async def accept_delivery(
    driver_id: str,
    order_id: str,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> FulfillmentResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role)
    result = process_for_order(order_id, AcceptDelivery(order_id=order_id, driver_id=driver_id))
    return FulfillmentResponse(**result)


@driver_router.put("/{driver_id}/orders/{order_id}/deliver", response_model=FulfillmentResponse)
async def complete_delivery(
    driver_id: str,
    order_id: str,
    body: CompleteDeliveryRequest | None = None,
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
) -> FulfillmentResponse:
    _acting_driver(driver_id, x_principal_id, x_principal_role)
    command = CompleteDelivery(
        order_id=order_id,
        driver_id=driver_id,
        proof_url=body.proof_url if body else None,
    )
    result = process_for_order(order_id, command)
    return FulfillmentResponse(**result)
