# ecocred/models/role_assignment.py

from sqlalchemy import Column, String, BigInteger
from ecocred.extensions import db
from ecocred.db_types import EnumType
from ecocred.constants import Role


class RoleAssignment(db.Model):
    __tablename__ = "role_assignments"

    # A single role per address; granting a new one replaces the old.
    address = Column(String(42), primary_key=True)
    role = Column(EnumType(Role, name="ledger_role", native_enum=False), nullable=False, default=Role.NONE)
    granted_by = Column(String(42), nullable=True)
    updated_at = Column(BigInteger, nullable=False)

    def to_dict(self):
        return {
            "address": self.address,
            "role": self.role.name,
            "granted_by": self.granted_by,
            "updated_at": self.updated_at,
        }
