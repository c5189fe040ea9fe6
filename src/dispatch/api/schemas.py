"""Pydantic request/response schemas for the Dispatch API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Order Request Schemas ---


class OrderItemRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    product_name: str | None = Field(None, max_length=255)
    sku: str | None = Field(None, max_length=100)
    seller_id: str | None = None
    images: list[str] = Field(default_factory=list)
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0.0)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "customer_name": "Asha Rao",
                    "customer_email": "asha@example.com",
                    "customer_phone": "9876543210",
                    "full_address": "12 MG Road, Bengaluru",
                    "landmark": "Near metro station",
                    "pincode": "560001",
                    "items": [
                        {
                            "product_id": "prod-001",
                            "product_name": "Basmati Rice 5kg",
                            "sku": "RICE-5KG",
                            "seller_id": "seller-042",
                            "images": ["https://cdn.example.com/rice.jpg"],
                            "quantity": 2,
                            "unit_price": 450.0,
                        }
                    ],
                    "taxes": 45.0,
                    "payment_method": "COD",
                }
            ]
        }
    }

    customer_id: str
    customer_name: str | None = Field(None, max_length=150)
    customer_email: str | None = Field(None, max_length=254)
    customer_phone: str | None = Field(None, max_length=20)
    full_address: str = Field(..., max_length=500)
    landmark: str | None = Field(None, max_length=200)
    pincode: str | None = Field(None, max_length=10)
    items: list[OrderItemRequest] = Field(..., min_length=1)
    delivery_fee: float | None = Field(None, ge=0.0)
    taxes: float = Field(0.0, ge=0.0)
    payment_method: str | None = Field(None, max_length=50)
    payment_status: str | None = None
    notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "CANCELLED", "cancellation_reason": "Customer requested"},
                {"status": "DELIVERED", "force": True, "notes": "Confirmed by phone"},
            ]
        }
    }

    status: str
    notes: str | None = None
    cancellation_reason: str | None = Field(None, max_length=500)
    force: bool = False
    expected_version: int | None = None


class AssignDriverRequest(BaseModel):
    driver_id: str
    expected_version: int | None = None


class SetVerificationRequest(BaseModel):
    status: str


# --- Seller / Driver Request Schemas ---


class RegisterSellerRequest(BaseModel):
    user_id: str | None = None
    brand_name: str | None = Field(None, max_length=150)
    legal_business_name: str | None = Field(None, max_length=255)


class RegisterDriverRequest(BaseModel):
    user_id: str
    name: str = Field(..., max_length=150)
    phone: str | None = Field(None, max_length=20)
    role: str


class CompleteDeliveryRequest(BaseModel):
    proof_url: str | None = Field(None, max_length=1000)


# --- Response Schemas ---


class OrderIdResponse(BaseModel):
    order_id: str


class SellerIdResponse(BaseModel):
    seller_id: str


class DriverIdResponse(BaseModel):
    driver_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderStatusResponse(BaseModel):
    id: str
    status: str
    updated_at: datetime | None = None
    version: int
    forced: bool = False


class FulfillmentResponse(BaseModel):
    id: str
    status: str
    driver_id: str | None = None
    updated_at: datetime | None = None
    version: int
