# ecocred/models/proposal.py

from sqlalchemy import Column, String, Integer, Text, Boolean, BigInteger
from sqlalchemy.orm import relationship
from ecocred.extensions import db
from ecocred.db_types import JSONType, Uint256


class Proposal(db.Model):
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, autoincrement=False)
    proposer = Column(String(42), nullable=False, index=True)
    description = Column(Text, nullable=False)
    # Governable contract name, e.g. "marketplace".
    target = Column(String(64), nullable=False)
    call_data = Column(JSONType, nullable=False)
    votes_for = Column(Uint256, nullable=False, default=0)
    votes_against = Column(Uint256, nullable=False, default=0)
    deadline = Column(BigInteger, nullable=False)
    executed = Column(Boolean, nullable=False, default=False)
    executed_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)

    votes = relationship("ProposalVote", back_populates="proposal", cascade="all, delete-orphan")

    def to_dict(self):
        """Serializes the Proposal object to a dictionary."""
        return {
            "id": self.id,
            "proposer": self.proposer,
            "description": self.description,
            "target": self.target,
            "data": self.call_data,
            "votes_for": str(self.votes_for),
            "votes_against": str(self.votes_against),
            "deadline": self.deadline,
            "executed": self.executed,
            "executed_at": self.executed_at,
            "created_at": self.created_at,
        }
