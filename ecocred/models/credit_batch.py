# ecocred/models/credit_batch.py

from sqlalchemy import (
    Column, String, Integer, Boolean, BigInteger, UniqueConstraint
)
from ecocred.extensions import db
from ecocred.db_types import Uint256


class CreditBatch(db.Model):
    """Credits awarded to a holder in one mint, with the time they lapse."""
    __tablename__ = "credit_batches"

    id = Column(Integer, primary_key=True, autoincrement=False)
    holder = Column(String(42), nullable=False, index=True)
    batch_index = Column(Integer, nullable=False)
    amount = Column(Uint256, nullable=False)
    minted_at = Column(BigInteger, nullable=False)
    expires_at = Column(BigInteger, nullable=False, index=True)
    source_action_id = Column(Integer, nullable=True)
    expired = Column(Boolean, nullable=False, default=False)
    # What was actually burned; less than amount if the holder moved credits away.
    expired_amount = Column(Uint256, nullable=False, default=0)
    expired_at = Column(BigInteger, nullable=True)

    __table_args__ = (
        UniqueConstraint('holder', 'batch_index', name='uq_credit_batch_holder_index'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "holder": self.holder,
            "batch_index": self.batch_index,
            "amount": str(self.amount),
            "minted_at": self.minted_at,
            "expires_at": self.expires_at,
            "source_action_id": self.source_action_id,
            "expired": self.expired,
            "expired_amount": str(self.expired_amount),
            "expired_at": self.expired_at,
        }
