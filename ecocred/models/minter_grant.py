# ecocred/models/minter_grant.py

from sqlalchemy import Column, String, BigInteger
from ecocred.extensions import db


class MinterGrant(db.Model):
    """One row per address allowed to mint credits (the minter set)."""
    __tablename__ = "minter_grants"

    address = Column(String(42), primary_key=True)
    granted_at = Column(BigInteger, nullable=False)

    def to_dict(self):
        return {"address": self.address, "granted_at": self.granted_at}
