# ecocred/models/stake.py

from sqlalchemy import (
    Column, String, Integer, Boolean, BigInteger, UniqueConstraint
)
from ecocred.extensions import db
from ecocred.db_types import Uint256


class Stake(db.Model):
    __tablename__ = "stakes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    staker = Column(String(42), nullable=False, index=True)
    # Position in the staker's own list; what unstake() addresses.
    stake_index = Column(Integer, nullable=False)
    amount = Column(Uint256, nullable=False)
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=False)
    lock_period_days = Column(Integer, nullable=False)
    reward_rate_bps = Column(Integer, nullable=False)
    claimed = Column(Boolean, nullable=False, default=False)
    reward_paid = Column(Uint256, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('staker', 'stake_index', name='uq_stake_staker_index'),
    )

    def to_dict(self):
        """Serializes the Stake object to a dictionary."""
        return {
            "id": self.id,
            "staker": self.staker,
            "stake_index": self.stake_index,
            "amount": str(self.amount),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "lock_period_days": self.lock_period_days,
            "reward_rate_bps": self.reward_rate_bps,
            "claimed": self.claimed,
            "reward_paid": str(self.reward_paid),
        }
