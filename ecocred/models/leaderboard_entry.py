# ecocred/models/leaderboard_entry.py

from sqlalchemy import Column, String, Integer, BigInteger
from ecocred.extensions import db
from ecocred.db_types import Uint256


class LeaderboardEntry(db.Model):
    __tablename__ = "leaderboard_entries"

    company = Column(String(42), primary_key=True)
    rank = Column(Integer, nullable=False, index=True)
    credits = Column(Uint256, nullable=False, default=0)
    updated_at = Column(BigInteger, nullable=False)

    def to_dict(self):
        return {
            "company": self.company,
            "rank": self.rank,
            "credits": str(self.credits),
            "updated_at": self.updated_at,
        }
