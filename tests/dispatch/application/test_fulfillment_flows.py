"""Application tests for the driver-driven picking and delivery flows."""

import pytest
from protean import current_domain

from dispatch.admin import operations
from dispatch.assignment.service import assign
from dispatch.exceptions import Forbidden, IllegalTransition, IneligibleDriver, NotFound
from dispatch.order.fulfillment import AcceptDelivery, CompleteDelivery, CompletePicking, StartPicking
from dispatch.order.locking import process_for_order
from dispatch.order.order import Order


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _confirmed_order(admin, place_order):
    order_id = place_order()
    operations.update_status(admin, order_id, "CONFIRMED")
    return order_id


def _run(command):
    return process_for_order(command.order_id, command)


class TestPicking:
    def test_helper_picks_a_confirmed_order(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        helper = make_driver(name="Meena", role="PICKUP_HELPER")

        result = _run(StartPicking(order_id=order_id, driver_id=helper))
        assert result["status"] == "PICKING"
        assert result["driver_id"] == helper

        result = _run(CompletePicking(order_id=order_id, driver_id=helper))
        assert result["status"] == "PICKED"

    def test_delivery_driver_cannot_pick(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        driver = make_driver()
        with pytest.raises(Forbidden):
            _run(StartPicking(order_id=order_id, driver_id=driver))

    def test_unverified_helper_is_ineligible(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        helper = make_driver(role="PICKUP_HELPER", verified=False)
        with pytest.raises(IneligibleDriver):
            _run(StartPicking(order_id=order_id, driver_id=helper))

    def test_pending_order_cannot_be_picked(self, place_order, make_driver):
        order_id = place_order()
        helper = make_driver(role="PICKUP_HELPER")
        with pytest.raises(IllegalTransition):
            _run(StartPicking(order_id=order_id, driver_id=helper))
        assert _load(order_id).driver_id is None

    def test_order_held_by_someone_else(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        first = make_driver(name="Meena", role="PICKUP_HELPER")
        second = make_driver(name="Sita", role="PICKUP_HELPER")
        assign(admin, order_id, first)
        with pytest.raises(Forbidden):
            _run(StartPicking(order_id=order_id, driver_id=second))

    def test_only_the_bound_helper_completes_picking(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        first = make_driver(name="Meena", role="PICKUP_HELPER")
        second = make_driver(name="Sita", role="PICKUP_HELPER")
        _run(StartPicking(order_id=order_id, driver_id=first))
        with pytest.raises(Forbidden):
            _run(CompletePicking(order_id=order_id, driver_id=second))

    def test_removed_helper(self, admin, place_order, make_driver):
        from dispatch.driver.registration import RemoveDriver

        order_id = _confirmed_order(admin, place_order)
        helper = make_driver(role="PICKUP_HELPER")
        current_domain.process(RemoveDriver(driver_id=helper), asynchronous=False)
        with pytest.raises(NotFound):
            _run(StartPicking(order_id=order_id, driver_id=helper))


class TestDelivery:
    def _picked_order(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        helper = make_driver(name="Meena", role="PICKUP_HELPER")
        _run(StartPicking(order_id=order_id, driver_id=helper))
        _run(CompletePicking(order_id=order_id, driver_id=helper))
        return order_id, helper

    def test_driver_takes_over_from_helper_and_delivers(self, admin, place_order, make_driver):
        order_id, _ = self._picked_order(admin, place_order, make_driver)
        driver = make_driver(name="Ravi")

        result = _run(AcceptDelivery(order_id=order_id, driver_id=driver))
        assert result["status"] == "OUT_FOR_DELIVERY"
        assert result["driver_id"] == driver

        result = _run(CompleteDelivery(order_id=order_id, driver_id=driver, proof_url="https://cdn/proof.jpg"))
        assert result["status"] == "DELIVERED"

        order = _load(order_id)
        assert order.delivered_at is not None
        assert order.notes == "Delivery proof: https://cdn/proof.jpg"

    def test_delivery_without_proof_keeps_notes(self, admin, place_order, make_driver):
        order_id, _ = self._picked_order(admin, place_order, make_driver)
        driver = make_driver(name="Ravi")
        _run(AcceptDelivery(order_id=order_id, driver_id=driver))
        _run(CompleteDelivery(order_id=order_id, driver_id=driver))
        assert _load(order_id).notes is None

    def test_helper_cannot_accept_delivery(self, admin, place_order, make_driver):
        order_id, helper = self._picked_order(admin, place_order, make_driver)
        with pytest.raises(Forbidden):
            _run(AcceptDelivery(order_id=order_id, driver_id=helper))

    def test_another_delivery_driver_holds_the_order(self, admin, place_order, make_driver):
        order_id, _ = self._picked_order(admin, place_order, make_driver)
        first = make_driver(name="Ravi")
        second = make_driver(name="Sunil")
        assign(admin, order_id, first)
        with pytest.raises(Forbidden):
            _run(AcceptDelivery(order_id=order_id, driver_id=second))

    def test_admin_assigned_driver_accepts(self, admin, place_order, make_driver):
        order_id, _ = self._picked_order(admin, place_order, make_driver)
        driver = make_driver(name="Ravi")
        assign(admin, order_id, driver)
        result = _run(AcceptDelivery(order_id=order_id, driver_id=driver))
        assert result["status"] == "OUT_FOR_DELIVERY"

    def test_order_not_yet_picked(self, admin, place_order, make_driver):
        order_id = _confirmed_order(admin, place_order)
        driver = make_driver()
        with pytest.raises(IllegalTransition):
            _run(AcceptDelivery(order_id=order_id, driver_id=driver))

    def test_only_the_bound_driver_completes_delivery(self, admin, place_order, make_driver):
        order_id, _ = self._picked_order(admin, place_order, make_driver)
        first = make_driver(name="Ravi")
        second = make_driver(name="Sunil")
        _run(AcceptDelivery(order_id=order_id, driver_id=first))
        with pytest.raises(Forbidden):
            _run(CompleteDelivery(order_id=order_id, driver_id=second))
