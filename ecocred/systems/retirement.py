# ecocred/systems/retirement.py
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ecocred.constants import RETIREMENT_ADDRESS
from ecocred.errors import InvalidArgumentError, NotFoundError
from ecocred.events import CreditsRetired
from ecocred.models import Retirement
from ecocred.systems import storage
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token, require_positive_amount
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


class RetirementRegistry:
    """Permanent, certificate-backed destruction of credits. There is no un-retire."""
    address = RETIREMENT_ADDRESS

    def retire_credits(
        self,
        tx: LedgerTransaction,
        caller: str,
        amount: int,
        reason: str,
        certificate_id: str,
    ) -> int:
        require_positive_amount(amount)
        if not isinstance(certificate_id, str) or not certificate_id.strip():
            raise InvalidArgumentError("certificate_id must not be empty")
        certificate_id = certificate_id.strip()
        if tx.session.query(Retirement).filter_by(certificate_id=certificate_id).first() is not None:
            raise InvalidArgumentError(f"Certificate {certificate_id} has already been used")

        credit_token.burn(tx, caller, amount)

        retirement_id = storage.next_id(tx.session, storage.RETIREMENT_IDS)
        tx.session.add(Retirement(
            id=retirement_id,
            retirer=caller,
            amount=amount,
            reason=reason or "",
            certificate_id=certificate_id,
            retired_at=tx.now,
        ))
        storage.adjust_counter(tx.session, storage.TOTAL_RETIRED, amount)
        tx.emit(CreditsRetired(
            retirement_id=retirement_id,
            retirer=caller,
            amount=amount,
            reason=reason or "",
            certificate_id=certificate_id,
        ))
        logger.info(f"♻️ {caller} retired {amount} credits (certificate {certificate_id})")
        return retirement_id

    # ------------------------- Reads -------------------------
    def get_retirement(self, session: Session, retirement_id: int) -> Dict[str, Any]:
        retirement = session.get(Retirement, retirement_id)
        if retirement is None:
            raise NotFoundError(f"Retirement {retirement_id} does not exist")
        return retirement.to_dict()

    def retirements_of(self, session: Session, retirer: str) -> List[Dict[str, Any]]:
        retirer = normalize_address(retirer, "retirer")
        rows = session.query(Retirement).filter_by(retirer=retirer).order_by(Retirement.id.asc()).all()
        return [r.to_dict() for r in rows]

    def total_retired(self, session: Session) -> int:
        return storage.read_counter(session, storage.TOTAL_RETIRED)

    def retired_by(self, session: Session, retirer: str) -> int:
        retirer = normalize_address(retirer, "retirer")
        return sum(r.amount for r in session.query(Retirement).filter_by(retirer=retirer).all())


# Singleton instance
retirement_registry = RetirementRegistry()
