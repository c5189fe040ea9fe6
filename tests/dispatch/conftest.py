import pytest
from protean.integrations.pytest import DomainFixture

from dispatch.config import reset_settings


@pytest.fixture(scope="session")
def dispatch_bed():
    from dispatch.domain import dispatch

    bed = DomainFixture(dispatch)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(dispatch_bed):
    with dispatch_bed.domain_context():
        yield
    reset_settings()


@pytest.fixture()
def admin():
    from dispatch.access import Principal, UserRole

    return Principal(user_id="admin-001", role=UserRole.ADMIN.value)


@pytest.fixture()
def place_order():
    """Place an order through the domain and return its id."""
    import json

    from protean import current_domain

    from dispatch.order.placement import PlaceOrder

    def _place(items=None, **overrides):
        fields = {
            "customer_id": "cust-001",
            "customer_name": "Asha Rao",
            "customer_email": "asha@example.com",
            "customer_phone": "9876543210",
            "full_address": "12 MG Road, Bengaluru",
            "landmark": "Near metro station",
            "pincode": "560001",
            "delivery_fee": 25.0,
            "taxes": 10.0,
            "payment_method": "COD",
        }
        fields.update(overrides)
        items = items or [
            {
                "product_id": "prod-001",
                "product_name": "Basmati Rice 5kg",
                "sku": "RICE-5KG",
                "seller_id": "seller-001",
                "images": ["https://cdn.example.com/rice.jpg"],
                "quantity": 2,
                "unit_price": 100.0,
            }
        ]
        return current_domain.process(PlaceOrder(items=json.dumps(items), **fields), asynchronous=False)

    return _place


@pytest.fixture()
def make_driver():
    """Register a driver, optionally verify it and bring it online."""
    from protean import current_domain

    from dispatch.access import UserRole
    from dispatch.driver.presence import GoOnline
    from dispatch.driver.registration import RegisterDriver, SetDriverVerification

    def _make(name="Ravi Kumar", role=UserRole.DELIVERY_DRIVER.value, verified=True, online=True, **extra):
        user_id = extra.get("user_id", f"user-{name.lower().replace(' ', '-')}")
        driver_id = current_domain.process(
            RegisterDriver(user_id=user_id, name=name, role=role),
            asynchronous=False,
        )
        if verified:
            current_domain.process(SetDriverVerification(driver_id=driver_id, status="VERIFIED"), asynchronous=False)
        if online:
            current_domain.process(GoOnline(driver_id=driver_id), asynchronous=False)
        return driver_id

    return _make
