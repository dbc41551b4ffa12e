# ecocred/systems/expiration.py
"""
Credit expiration.

Every verified award is recorded as a batch that lapses after the expiration
period in force when it was minted. ``check_and_expire`` may be called by
anyone; it burns the holder's lapsed batches, capped at the credits still in
the holder's wallet, so credits already sold, staked or retired are not
clawed back.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ecocred.constants import EXPIRATION_ADDRESS, SECONDS_PER_YEAR
from ecocred.errors import InvalidArgumentError, NotFoundError
from ecocred.events import CreditsExpired, ParameterUpdated
from ecocred.models import CreditBatch, MinterGrant
from ecocred.systems import storage
from ecocred.systems.access_control import require_owner
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token, require_positive_amount
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


class ExpirationRegistry:
    address = EXPIRATION_ADDRESS

    def expiration_period(self, session: Session) -> int:
        return storage.get_setting(session, storage.CREDIT_EXPIRATION_SECONDS, default=SECONDS_PER_YEAR)

    def record_batch(
        self,
        tx: LedgerTransaction,
        caller: str,
        holder: str,
        amount: int,
        source_action_id: Optional[int] = None,
    ) -> int:
        """Starts the expiry clock on freshly minted credits. Minters or the owner only."""
        if tx.session.get(MinterGrant, caller) is None:
            require_owner(tx, caller)
        holder = normalize_address(holder, "holder")
        require_positive_amount(amount)

        batch_index = tx.session.query(CreditBatch).filter_by(holder=holder).count()
        tx.session.add(CreditBatch(
            id=storage.next_id(tx.session, storage.CREDIT_BATCH_IDS),
            holder=holder,
            batch_index=batch_index,
            amount=amount,
            minted_at=tx.now,
            expires_at=tx.now + self.expiration_period(tx.session),
            source_action_id=source_action_id,
            expired=False,
            expired_amount=0,
        ))
        logger.debug(f"Credit batch {batch_index} of {holder} recorded: {amount}")
        return batch_index

    def check_and_expire(self, tx: LedgerTransaction, caller: str, holder: str) -> int:
        """Expires every lapsed batch of ``holder`` and returns the amount burned."""
        holder = normalize_address(holder, "holder")
        due = (
            tx.session.query(CreditBatch)
            .filter_by(holder=holder, expired=False)
            .filter(CreditBatch.expires_at <= tx.now)
            .order_by(CreditBatch.batch_index.asc())
            .with_for_update()
            .all()
        )
        if not due:
            return 0

        budget = min(sum(b.amount for b in due), credit_token.balance_of(tx.session, holder))
        burned = 0
        for batch in due:
            take = min(batch.amount, budget - burned)
            batch.expired = True
            batch.expired_amount = take
            batch.expired_at = tx.now
            burned += take

        if burned > 0:
            credit_token.burn_expired(tx, self.address, holder, burned)
        tx.emit(CreditsExpired(holder=holder, amount=burned, batches=len(due)))
        logger.info(f"⏳ {len(due)} credit batches of {holder} expired; {burned} burned (checked by {caller})")
        return burned

    def set_expiration_period(self, tx: LedgerTransaction, caller: str, seconds: int) -> None:
        """Applies to batches recorded from now on."""
        require_owner(tx, caller)
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 1:
            raise InvalidArgumentError("seconds must be a positive integer")
        storage.put_setting(tx.session, storage.CREDIT_EXPIRATION_SECONDS, seconds)
        tx.emit(ParameterUpdated(contract="expiration", name="expiration_period_seconds", value=str(seconds)))
        logger.info(f"Credit expiration period set to {seconds} seconds")

    # ------------------------- Reads -------------------------
    def _batch_dict(self, batch: CreditBatch, now: int) -> Dict[str, Any]:
        data = batch.to_dict()
        data["can_expire"] = not batch.expired and batch.expires_at <= now
        return data

    def get_credit_batch(self, session: Session, holder: str, batch_index: int, now: int) -> Dict[str, Any]:
        holder = normalize_address(holder, "holder")
        batch = session.query(CreditBatch).filter_by(holder=holder, batch_index=batch_index).first()
        if batch is None:
            raise NotFoundError(f"{holder} has no credit batch at index {batch_index}")
        return self._batch_dict(batch, now)

    def get_credit_batches(self, session: Session, holder: str, now: int) -> List[Dict[str, Any]]:
        holder = normalize_address(holder, "holder")
        batches = session.query(CreditBatch).filter_by(holder=holder).order_by(CreditBatch.batch_index.asc()).all()
        return [self._batch_dict(b, now) for b in batches]

    def get_expiration_status(self, session: Session, holder: str, now: int) -> Dict[str, Any]:
        holder = normalize_address(holder, "holder")
        batches = session.query(CreditBatch).filter_by(holder=holder).all()
        active = [b for b in batches if not b.expired]
        return {
            "holder": holder,
            "total_batches": len(batches),
            "active_batches": len(active),
            "expired_batches": len(batches) - len(active),
            "total_expired_amount": str(sum(b.expired_amount for b in batches if b.expired)),
            "expirable_amount": str(sum(b.amount for b in active if b.expires_at <= now)),
            "next_expiration_timestamp": min((b.expires_at for b in active), default=0),
        }

    def holders_due(self, session: Session, now: int) -> List[str]:
        """Holders with at least one lapsed batch that has not been expired yet."""
        rows = (
            session.query(CreditBatch.holder)
            .filter(CreditBatch.expired.is_(False), CreditBatch.expires_at <= now)
            .distinct()
            .order_by(CreditBatch.holder.asc())
            .all()
        )
        return [row.holder for row in rows]


# Singleton instance
expiration_registry = ExpirationRegistry()
