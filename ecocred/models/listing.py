# ecocred/models/listing.py

from sqlalchemy import Column, String, Integer, BigInteger
from ecocred.extensions import db
from ecocred.db_types import EnumType, Uint256
from ecocred.constants import ListingStatus


class Listing(db.Model):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, autoincrement=False)
    seller = Column(String(42), nullable=False, index=True)
    original_amount = Column(Uint256, nullable=False)
    remaining_amount = Column(Uint256, nullable=False)
    # Native currency (wei) per whole credit.
    price_per_credit = Column(Uint256, nullable=False)
    status = Column(
        EnumType(ListingStatus, name="listing_status", native_enum=False),
        nullable=False,
        default=ListingStatus.ACTIVE,
        index=True,
    )
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    @property
    def active(self) -> bool:
        return self.status == ListingStatus.ACTIVE

    def to_dict(self):
        """Serializes the Listing object to a dictionary."""
        return {
            "id": self.id,
            "seller": self.seller,
            "original_amount": str(self.original_amount),
            "remaining_amount": str(self.remaining_amount),
            "price_per_credit": str(self.price_per_credit),
            "status": self.status.value,
            "active": self.active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
