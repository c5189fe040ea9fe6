"""Admin write operations, each guarded by an explicit admin check."""

from dispatch.access import Principal, require_admin
from dispatch.driver.registration import SetDriverVerification
from dispatch.order.locking import process_for_driver, process_for_order
from dispatch.order.removal import DeleteOrder
from dispatch.order.status import UpdateOrderStatus


def update_status(
    principal: Principal,
    order_id: str,
    status: str,
    notes: str | None = None,
    cancellation_reason: str | None = None,
    force: bool = False,
    expected_version: int | None = None,
) -> dict:
    require_admin(principal)
    return process_for_order(
        order_id,
        UpdateOrderStatus(
            order_id=order_id,
            status=status,
            notes=notes,
            cancellation_reason=cancellation_reason,
            force=force,
            expected_version=expected_version,
            changed_by=principal.user_id,
        ),
    )


def delete_order(principal: Principal, order_id: str) -> None:
    require_admin(principal)
    process_for_order(order_id, DeleteOrder(order_id=order_id))


def set_driver_verification(principal: Principal, driver_id: str, status: str) -> None:
    require_admin(principal)
    process_for_driver(driver_id, SetDriverVerification(driver_id=driver_id, status=status))
