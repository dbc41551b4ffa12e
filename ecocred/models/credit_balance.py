# ecocred/models/credit_balance.py

from sqlalchemy import Column, String, BigInteger
from ecocred.extensions import db
from ecocred.db_types import Uint256


class CreditBalance(db.Model):
    __tablename__ = "credit_balances"

    address = Column(String(42), primary_key=True)
    balance = Column(Uint256, nullable=False, default=0)
    updated_at = Column(BigInteger, nullable=True)

    def to_dict(self):
        """Serializes the CreditBalance object to a dictionary."""
        return {
            "address": self.address,
            "balance": str(self.balance),  # Return as string for precision
            "updated_at": self.updated_at,
        }
