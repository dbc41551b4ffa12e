# ecocred/models/proposal_vote.py

from sqlalchemy import Column, String, Integer, Boolean, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from ecocred.extensions import db
from ecocred.db_types import Uint256


class ProposalVote(db.Model):
    __tablename__ = "proposal_votes"

    proposal_id = Column(Integer, ForeignKey("proposals.id", ondelete="CASCADE"), primary_key=True)
    voter = Column(String(42), primary_key=True)
    support = Column(Boolean, nullable=False)
    # Balance at the moment of voting; later transfers do not change it.
    power = Column(Uint256, nullable=False)
    cast_at = Column(BigInteger, nullable=False)

    proposal = relationship("Proposal", back_populates="votes")

    def to_dict(self):
        return {
            "proposal_id": self.proposal_id,
            "voter": self.voter,
            "support": self.support,
            "power": str(self.power),
            "cast_at": self.cast_at,
        }
