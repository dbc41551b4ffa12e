# ecocred/models/verification_record.py

from sqlalchemy import (
    Column, String, Integer, Text, Boolean, BigInteger, ForeignKey
)
from sqlalchemy.orm import relationship
from ecocred.extensions import db


class VerificationRecord(db.Model):
    __tablename__ = "verification_records"

    # The composite key is the at-most-once-per-verifier guarantee.
    action_id = Column(Integer, ForeignKey("eco_actions.id", ondelete="CASCADE"), primary_key=True)
    verifier = Column(String(42), primary_key=True)
    approved = Column(Boolean, nullable=False)
    actual_credits = Column(Integer, nullable=False, default=0)
    comments = Column(Text, nullable=False, default="")
    recorded_at = Column(BigInteger, nullable=False)

    action = relationship("EcoAction", back_populates="verifications")

    def to_dict(self):
        return {
            "action_id": self.action_id,
            "verifier": self.verifier,
            "approved": self.approved,
            "actual_credits": self.actual_credits,
            "comments": self.comments,
            "recorded_at": self.recorded_at,
        }
