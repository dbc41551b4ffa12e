# ecocred/models/retirement.py

from sqlalchemy import Column, String, Integer, Text, BigInteger
from ecocred.extensions import db
from ecocred.db_types import Uint256


class Retirement(db.Model):
    __tablename__ = "retirements"

    id = Column(Integer, primary_key=True, autoincrement=False)
    retirer = Column(String(42), nullable=False, index=True)
    amount = Column(Uint256, nullable=False)
    reason = Column(Text, nullable=False, default="")
    certificate_id = Column(String(255), nullable=False, unique=True)
    retired_at = Column(BigInteger, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "retirer": self.retirer,
            "amount": str(self.amount),
            "reason": self.reason,
            "certificate_id": self.certificate_id,
            "retired_at": self.retired_at,
        }
