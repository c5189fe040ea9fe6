"""Seller aggregate — display details used when presenting orders."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from dispatch.domain import dispatch


@dispatch.aggregate
class Seller:
    user_id = Identifier()
    brand_name = String(max_length=150)
    legal_business_name = String(max_length=255)
    created_at = DateTime()

    @property
    def display_name(self) -> str:
        return self.brand_name or self.legal_business_name or "Unknown"


@dispatch.command(part_of="Seller")
class RegisterSeller:
    """Register the display details of a seller."""

    user_id = Identifier()
    brand_name = String(max_length=150)
    legal_business_name = String(max_length=255)


@dispatch.command_handler(part_of=Seller)
class RegisterSellerHandler:
    @handle(RegisterSeller)
    def register_seller(self, command):
        seller = Seller(
            user_id=command.user_id,
            brand_name=command.brand_name,
            legal_business_name=command.legal_business_name,
            created_at=datetime.now(UTC),
        )
        current_domain.repository_for(Seller).add(seller)
        return str(seller.id)
