# ecocred/models/ledger_event.py

from sqlalchemy import Column, String, Integer, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from ecocred.extensions import db
from ecocred.db_types import JSONType


class LedgerEvent(db.Model):
    __tablename__ = "ledger_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    block_height = Column(Integer, ForeignKey("chain_blocks.height"), nullable=False, index=True)
    tx_id = Column(String(32), nullable=False, index=True)
    log_index = Column(Integer, nullable=False)
    event_type = Column(String(64), nullable=False, index=True)
    schema_version = Column(Integer, nullable=False)
    payload = Column(JSONType, nullable=False)
    timestamp = Column(BigInteger, nullable=False)

    block = relationship("ChainBlock", back_populates="events")

    def to_dict(self):
        """Serializes the LedgerEvent object to a dictionary."""
        return {
            "id": self.id,
            "block_height": self.block_height,
            "tx_id": self.tx_id,
            "log_index": self.log_index,
            "event_type": self.event_type,
            "schema_version": self.schema_version,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }
