# ecocred/systems/access_control.py
import logging
from typing import Union

from sqlalchemy.orm import Session

from ecocred.constants import ACCESS_CONTROL_ADDRESS, Role
from ecocred.errors import InvalidArgumentError, UnauthorizedError
from ecocred.events import RoleGranted
from ecocred.models import RoleAssignment
from ecocred.systems import storage
from ecocred.systems.chain import LedgerTransaction
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


def parse_role(value: Union[str, int, Role]) -> Role:
    """Accepts a Role, its name (any case) or its number."""
    if isinstance(value, Role):
        return value
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Malformed role: {value!r}")
    if isinstance(value, int):
        try:
            return Role(value)
        except ValueError:
            raise InvalidArgumentError(f"Unknown role number: {value}")
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_role(int(text))
        try:
            return Role[text.upper()]
        except KeyError:
            raise InvalidArgumentError(f"Unknown role name: {value!r}")
    raise InvalidArgumentError(f"Malformed role: {value!r}")


def require_owner(tx: LedgerTransaction, caller: str) -> None:
    """Raises Unauthorized unless ``caller`` is the platform owner."""
    owner = storage.get_setting(tx.session, storage.OWNER)
    if caller != owner:
        raise UnauthorizedError(f"{caller} is not the platform owner")


class AccessControl:
    """Single-role-per-address registry; ADMIN manages it."""
    address = ACCESS_CONTROL_ADDRESS

    def role_of(self, session: Session, account: str) -> Role:
        assignment = session.get(RoleAssignment, normalize_address(account, "account"))
        return assignment.role if assignment else Role.NONE

    def has_role(self, session: Session, account: str, role) -> bool:
        return self.role_of(session, account) == parse_role(role)

    def require_role(self, session: Session, account: str, *roles: Role) -> Role:
        role = self.role_of(session, account)
        if role not in roles:
            wanted = " or ".join(r.name for r in roles)
            raise UnauthorizedError(f"{account} lacks the {wanted} role")
        return role

    def _assign(self, tx: LedgerTransaction, caller: str, account: str, role: Role) -> None:
        assignment = tx.session.get(RoleAssignment, account)
        if assignment is None:
            assignment = RoleAssignment(address=account)
            tx.session.add(assignment)
        assignment.role = role
        assignment.granted_by = caller
        assignment.updated_at = tx.now
        tx.emit(RoleGranted(account=account, role=role.name, granted_by=caller))
        logger.info(f"🔑 Role {role.name} assigned to {account} by {caller}")

    def grant_role(self, tx: LedgerTransaction, caller: str, account: str, role) -> None:
        """Overwrites ``account``'s role. ADMIN only."""
        self.require_role(tx.session, caller, Role.ADMIN)
        account = normalize_address(account, "account")
        self._assign(tx, caller, account, parse_role(role))

    def revoke_role(self, tx: LedgerTransaction, caller: str, account: str) -> None:
        self.require_role(tx.session, caller, Role.ADMIN)
        account = normalize_address(account, "account")
        self._assign(tx, caller, account, Role.NONE)

    def bootstrap_admin(self, tx: LedgerTransaction, account: str) -> None:
        """Seeds the first ADMIN. Only used while the ledger is being initialised."""
        self._assign(tx, self.address, normalize_address(account, "account"), Role.ADMIN)


# Singleton instance
access_control = AccessControl()
