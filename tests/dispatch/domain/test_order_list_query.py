"""Tests for admin list parameters, image parsing and the admin guard."""

from datetime import date

import pytest

from dispatch.access import Principal, require_acting_driver, require_admin
from dispatch.admin.queries import OrderListQuery, first_image
from dispatch.config import set_settings_for_test
from dispatch.exceptions import Forbidden, MalformedInput


class TestOrderListQuery:
    def test_defaults(self):
        query = OrderListQuery.parse()
        assert query.status == "ALL"
        assert query.payment_status == "ALL"
        assert query.sort_by == "recent"
        assert query.sort_order == "desc"
        assert query.page == 1
        assert query.limit == 20

    def test_default_limit_comes_from_settings(self):
        set_settings_for_test(default_page_size=5)
        assert OrderListQuery.parse().limit == 5

    def test_parses_raw_strings(self):
        query = OrderListQuery.parse(page="2", limit="10", date_from="2024-01-01", status="PICKED")
        assert query.page == 2
        assert query.limit == 10
        assert query.date_from == date(2024, 1, 1)
        assert query.status == "PICKED"

    def test_unset_values_fall_back_to_defaults(self):
        query = OrderListQuery.parse(status=None, page=None)
        assert query.status == "ALL"
        assert query.page == 1

    @pytest.mark.parametrize(
        "params",
        [
            {"status": "SHIPPED"},
            {"payment_status": "PAID"},
            {"sort_by": "customer"},
            {"sort_order": "sideways"},
            {"page": "0"},
            {"page": "abc"},
            {"limit": "0"},
            {"limit": "101"},
            {"date_from": "yesterday"},
            {"date_from": "2024-02-01", "date_to": "2024-01-01"},
        ],
    )
    def test_rejects_malformed_parameters(self, params):
        with pytest.raises(MalformedInput):
            OrderListQuery.parse(**params)

    def test_same_day_range_is_valid(self):
        query = OrderListQuery.parse(date_from="2024-01-01", date_to="2024-01-01")
        assert query.date_from == query.date_to


class TestFirstImage:
    def test_first_url(self):
        assert first_image('["https://img/a.jpg", "https://img/b.jpg"]') == "https://img/a.jpg"

    def test_empty_list(self):
        assert first_image("[]") is None

    def test_missing(self):
        assert first_image(None) is None

    def test_malformed_json(self):
        assert first_image("[not json") is None

    def test_not_a_list(self):
        assert first_image('{"url": "https://img/a.jpg"}') is None


class TestRequireAdmin:
    def test_admin_passes(self):
        principal = Principal(user_id="admin-001", role="ADMIN")
        assert require_admin(principal) is principal

    @pytest.mark.parametrize("role", [None, "CUSTOMER", "DELIVERY_DRIVER", "admin"])
    def test_non_admin_is_forbidden(self, role):
        with pytest.raises(Forbidden):
            require_admin(Principal(user_id="user-001", role=role))

    def test_missing_principal_is_forbidden(self):
        with pytest.raises(Forbidden):
            require_admin(None)


class TestRequireActingDriver:
    def test_the_driver_itself_passes(self):
        principal = Principal(user_id="user-ravi", role="DELIVERY_DRIVER")
        assert require_acting_driver(principal, "user-ravi", "DELIVERY_DRIVER") is principal

    @pytest.mark.parametrize(
        "principal",
        [
            None,
            Principal(user_id="user-sunil", role="DELIVERY_DRIVER"),
            Principal(user_id="user-ravi", role="PICKUP_HELPER"),
            Principal(user_id="admin-001", role="ADMIN"),
        ],
    )
    def test_anyone_else_is_forbidden(self, principal):
        with pytest.raises(Forbidden):
            require_acting_driver(principal, "user-ravi", "DELIVERY_DRIVER")

    def test_admin_passes_where_allowed(self):
        principal = Principal(user_id="admin-001", role="ADMIN")
        assert require_acting_driver(principal, "user-ravi", "DELIVERY_DRIVER", allow_admin=True) is principal
