# ecocred/models/eco_action.py

from sqlalchemy import (
    Column, String, Integer, Text, BigInteger, CheckConstraint
)
from sqlalchemy.orm import relationship
from ecocred.extensions import db
from ecocred.db_types import EnumType, Uint256
from ecocred.constants import ActionStatus, ActionOutcome


class EcoAction(db.Model):
    __tablename__ = "eco_actions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    company = Column(String(42), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, default="")
    location = Column(String(255), nullable=False, default="")
    estimated_credits = Column(Integer, nullable=False)

    status = Column(
        EnumType(ActionStatus, name="action_status", native_enum=False),
        nullable=False,
        default=ActionStatus.SUBMITTED,
    )
    outcome = Column(
        EnumType(ActionOutcome, name="action_outcome", native_enum=False),
        nullable=False,
        default=ActionOutcome.PENDING,
    )
    approval_count = Column(Integer, nullable=False, default=0)
    rejection_count = Column(Integer, nullable=False, default=0)
    # Whole credits of the final award before scaling; 0 until approved.
    actual_credits = Column(Integer, nullable=False, default=0)
    awarded_credits = Column(Uint256, nullable=False, default=0)
    badge_id = Column(Integer, nullable=True)

    created_at = Column(BigInteger, nullable=False)
    finalized_at = Column(BigInteger, nullable=True)

    verifications = relationship(
        "VerificationRecord",
        back_populates="action",
        cascade="all, delete-orphan",
        order_by="VerificationRecord.recorded_at",
    )

    __table_args__ = (
        CheckConstraint('estimated_credits > 0', name='check_estimated_credits_positive'),
    )

    @property
    def verified(self) -> bool:
        return self.status == ActionStatus.VERIFIED

    def to_dict(self):
        """Serializes the EcoAction object to a dictionary."""
        return {
            "id": self.id,
            "company": self.company,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "location": self.location,
            "estimated_credits": self.estimated_credits,
            "status": self.status.value,
            "outcome": self.outcome.value,
            "verified": self.verified,
            "approval_count": self.approval_count,
            "rejection_count": self.rejection_count,
            "actual_credits": self.actual_credits,
            "awarded_credits": str(self.awarded_credits),
            "badge_id": self.badge_id,
            "created_at": self.created_at,
            "finalized_at": self.finalized_at,
        }
