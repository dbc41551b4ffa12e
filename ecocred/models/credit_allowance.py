# ecocred/models/credit_allowance.py

from sqlalchemy import Column, String
from ecocred.extensions import db
from ecocred.db_types import Uint256


class CreditAllowance(db.Model):
    __tablename__ = "credit_allowances"

    owner = Column(String(42), primary_key=True)
    spender = Column(String(42), primary_key=True)
    amount = Column(Uint256, nullable=False, default=0)

    def to_dict(self):
        return {
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
        }
