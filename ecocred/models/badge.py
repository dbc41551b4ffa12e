# ecocred/models/badge.py

from sqlalchemy import Column, String, Integer, BigInteger
from ecocred.extensions import db


class Badge(db.Model):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(42), nullable=False, index=True)
    approved = Column(String(42), nullable=True)
    source_action_id = Column(Integer, nullable=True)
    minted_at = Column(BigInteger, nullable=False)

    def to_dict(self):
        """Serializes the Badge object to a dictionary."""
        return {
            "id": self.id,
            "owner": self.owner,
            "approved": self.approved,
            "source_action_id": self.source_action_id,
            "minted_at": self.minted_at,
        }


class BadgeOperator(db.Model):
    """An operator approved for every badge of ``owner``."""
    __tablename__ = "badge_operators"

    owner = Column(String(42), primary_key=True)
    operator = Column(String(42), primary_key=True)
