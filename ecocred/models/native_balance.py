# ecocred/models/native_balance.py

from sqlalchemy import Column, String
from ecocred.extensions import db
from ecocred.db_types import Uint256


class NativeBalance(db.Model):
    """Withdrawable native currency (wei) owed to an address by the marketplace."""
    __tablename__ = "native_balances"

    address = Column(String(42), primary_key=True)
    balance = Column(Uint256, nullable=False, default=0)

    def to_dict(self):
        return {"address": self.address, "balance": str(self.balance)}
