# ecocred/models/company_profile.py

from sqlalchemy import Column, String, Integer, BigInteger
from ecocred.extensions import db
from ecocred.db_types import Uint256


class CompanyProfile(db.Model):
    __tablename__ = "company_profiles"

    address = Column(String(42), primary_key=True)
    total_credits_earned = Column(Uint256, nullable=False, default=0)
    total_actions = Column(Integer, nullable=False, default=0)
    verified_actions = Column(Integer, nullable=False, default=0)
    rejected_actions = Column(Integer, nullable=False, default=0)
    reputation_score = Column(Integer, nullable=False, default=0)
    updated_at = Column(BigInteger, nullable=True)

    def to_dict(self):
        return {
            "address": self.address,
            "total_credits_earned": str(self.total_credits_earned),
            "total_actions": self.total_actions,
            "verified_actions": self.verified_actions,
            "rejected_actions": self.rejected_actions,
            "reputation_score": self.reputation_score,
            "updated_at": self.updated_at,
        }
