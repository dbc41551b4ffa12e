# ecocred/systems/badge_registry.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ecocred.constants import (
    BADGE_NAME,
    BADGE_REGISTRY_ADDRESS,
    BADGE_SYMBOL,
    NULL_ADDRESS,
    VERIFICATION_ADDRESS,
)
from ecocred.errors import InvalidArgumentError, InvalidRecipientError, NotFoundError, UnauthorizedError
from ecocred.events import BadgeApproval, BadgeApprovalForAll, BadgeTransfer, ParameterUpdated
from ecocred.models import Badge, BadgeOperator
from ecocred.systems import storage
from ecocred.systems.access_control import require_owner
from ecocred.systems.chain import LedgerTransaction
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)

# Contracts allowed to issue badges besides the platform owner.
AUTHORISED_ISSUERS = frozenset({VERIFICATION_ADDRESS})


class BadgeRegistry:
    """EcoBadge (ECOB) non-fungible achievement tokens."""
    address = BADGE_REGISTRY_ADDRESS
    name = BADGE_NAME
    symbol = BADGE_SYMBOL

    # ------------------------- Reads -------------------------
    def _get(self, session: Session, badge_id: int) -> Badge:
        badge = session.get(Badge, badge_id)
        if badge is None:
            raise NotFoundError(f"Badge {badge_id} does not exist")
        return badge

    def get_badge(self, session: Session, badge_id: int) -> dict:
        data = self._get(session, badge_id).to_dict()
        data["token_uri"] = self.token_uri(session, badge_id)
        return data

    def owner_of(self, session: Session, badge_id: int) -> str:
        return self._get(session, badge_id).owner

    def balance_of(self, session: Session, owner: str) -> int:
        return session.query(Badge).filter_by(owner=normalize_address(owner, "owner")).count()

    def tokens_of_owner(self, session: Session, owner: str) -> List[int]:
        rows = (
            session.query(Badge.id)
            .filter_by(owner=normalize_address(owner, "owner"))
            .order_by(Badge.id.asc())
            .all()
        )
        return [row.id for row in rows]

    def get_approved(self, session: Session, badge_id: int) -> Optional[str]:
        return self._get(session, badge_id).approved

    def is_approved_for_all(self, session: Session, owner: str, operator: str) -> bool:
        key = (normalize_address(owner, "owner"), normalize_address(operator, "operator"))
        return session.get(BadgeOperator, key) is not None

    def next_id(self, session: Session) -> int:
        return storage.read_counter(session, storage.BADGE_IDS) + 1

    def token_uri(self, session: Session, badge_id: int) -> str:
        self._get(session, badge_id)
        base_uri = storage.get_setting(session, storage.BADGE_BASE_URI, default="")
        return f"{base_uri}{badge_id}"

    # ------------------------- Mutations -------------------------
    def safe_mint(self, tx: LedgerTransaction, caller: str, to: str, source_action_id: int = None) -> int:
        """Issues the next badge id to ``to``. Owner or an authorised issuer only."""
        if caller not in AUTHORISED_ISSUERS:
            require_owner(tx, caller)
        to = normalize_address(to, "to")
        if to == NULL_ADDRESS:
            raise InvalidRecipientError("Badges cannot be minted to the null address")
        badge_id = storage.next_id(tx.session, storage.BADGE_IDS)
        tx.session.add(Badge(id=badge_id, owner=to, source_action_id=source_action_id, minted_at=tx.now))
        tx.emit(BadgeTransfer(from_=NULL_ADDRESS, to=to, badge_id=badge_id))
        logger.info(f"🏅 Badge #{badge_id} minted to {to}")
        return badge_id

    def _can_manage(self, session: Session, badge: Badge, caller: str) -> bool:
        if caller == badge.owner:
            return True
        return session.get(BadgeOperator, (badge.owner, caller)) is not None

    def transfer_from(self, tx: LedgerTransaction, caller: str, from_address: str, to: str, badge_id: int) -> None:
        badge = self._get(tx.session, badge_id)
        from_address = normalize_address(from_address, "from")
        to = normalize_address(to, "to")
        if badge.owner != from_address:
            raise InvalidArgumentError(f"Badge {badge_id} is not owned by {from_address}")
        if not (self._can_manage(tx.session, badge, caller) or badge.approved == caller):
            raise UnauthorizedError(f"{caller} may not transfer badge {badge_id}")
        if to == NULL_ADDRESS:
            raise InvalidRecipientError("Badges cannot be transferred to the null address")
        badge.owner = to
        badge.approved = None
        tx.emit(BadgeTransfer(from_=from_address, to=to, badge_id=badge_id))

    def approve(self, tx: LedgerTransaction, caller: str, to: Optional[str], badge_id: int) -> None:
        """Sets the per-token approval; ``None`` or the null address clears it."""
        badge = self._get(tx.session, badge_id)
        if not self._can_manage(tx.session, badge, caller):
            raise UnauthorizedError(f"{caller} may not approve badge {badge_id}")
        approved = normalize_address(to, "to") if to else NULL_ADDRESS
        if approved == badge.owner:
            raise InvalidArgumentError("Cannot approve the current owner")
        badge.approved = None if approved == NULL_ADDRESS else approved
        tx.emit(BadgeApproval(owner=badge.owner, approved=approved, badge_id=badge_id))

    def set_approval_for_all(self, tx: LedgerTransaction, caller: str, operator: str, approved: bool) -> None:
        operator = normalize_address(operator, "operator")
        if operator == caller:
            raise InvalidArgumentError("Cannot set approval for yourself")
        existing = tx.session.get(BadgeOperator, (caller, operator))
        if approved and existing is None:
            tx.session.add(BadgeOperator(owner=caller, operator=operator))
        elif not approved and existing is not None:
            tx.session.delete(existing)
        tx.emit(BadgeApprovalForAll(owner=caller, operator=operator, approved=bool(approved)))

    def set_base_uri(self, tx: LedgerTransaction, caller: str, uri: str) -> None:
        require_owner(tx, caller)
        if not isinstance(uri, str):
            raise InvalidArgumentError("uri must be a string")
        storage.put_setting(tx.session, storage.BADGE_BASE_URI, uri)
        tx.emit(ParameterUpdated(contract="badge", name="base_uri", value=uri))


# Singleton instance
badge_registry = BadgeRegistry()
