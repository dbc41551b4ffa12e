# ecocred/models/chain_block.py

from sqlalchemy import Column, String, Integer, BigInteger
from sqlalchemy.orm import relationship
from ecocred.extensions import db


class ChainBlock(db.Model):
    __tablename__ = "chain_blocks"

    # The unique height is what serializes concurrent writers.
    height = Column(Integer, primary_key=True, autoincrement=False)
    previous_hash = Column(String(64), nullable=False)
    merkle_root = Column(String(64), nullable=False)
    block_hash = Column(String(64), nullable=False, unique=True)
    tx_id = Column(String(32), nullable=True)
    timestamp = Column(BigInteger, nullable=False)
    event_count = Column(Integer, nullable=False, default=0)

    events = relationship("LedgerEvent", back_populates="block", order_by="LedgerEvent.log_index")

    def to_dict(self):
        """Serializes the ChainBlock object to a dictionary."""
        return {
            "height": self.height,
            "previous_hash": self.previous_hash,
            "merkle_root": self.merkle_root,
            "block_hash": self.block_hash,
            "tx_id": self.tx_id,
            "timestamp": self.timestamp,
            "event_count": self.event_count,
        }
