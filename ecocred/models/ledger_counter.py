# ecocred/models/ledger_counter.py

from sqlalchemy import Column, String
from ecocred.extensions import db
from ecocred.db_types import Uint256


class LedgerCounter(db.Model):
    """Durable sequences (entity ids) and running totals (supply, burned)."""
    __tablename__ = "ledger_counters"

    name = Column(String(64), primary_key=True)
    value = Column(Uint256, nullable=False, default=0)

    def to_dict(self):
        return {"name": self.name, "value": str(self.value)}
