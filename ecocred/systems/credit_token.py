# ecocred/systems/credit_token.py
"""
Carbon Credit (CCT) fungible ledger.

Balances, allowances, the minter set and the supply totals all live in the
database; every mutation happens inside a LedgerTransaction and is emitted
as an event.
"""
import logging
from typing import List, Sequence

from sqlalchemy.orm import Session

from ecocred.constants import (
    CREDIT_DECIMALS,
    CREDIT_TOKEN_ADDRESS,
    CREDIT_TOKEN_NAME,
    CREDIT_TOKEN_SYMBOL,
    EXPIRATION_ADDRESS,
    NULL_ADDRESS,
)
from ecocred.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidArgumentError,
    InvalidRecipientError,
    UnauthorizedError,
)
from ecocred.events import Approval, MinterUpdated, OwnershipTransferred, Transfer
from ecocred.models import CreditAllowance, CreditBalance, MinterGrant
from ecocred.systems import storage
from ecocred.systems.access_control import require_owner
from ecocred.systems.chain import LedgerTransaction
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


def require_positive_amount(amount, field: str = "amount") -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgumentError(f"{field} must be an integer, got {amount!r}")
    if amount <= 0:
        raise InvalidArgumentError(f"{field} must be greater than zero")
    return amount


def _recipient(to: str) -> str:
    to = normalize_address(to, "to")
    if to == NULL_ADDRESS:
        raise InvalidRecipientError("Recipient cannot be the null address")
    return to


class CreditToken:
    address = CREDIT_TOKEN_ADDRESS
    name = CREDIT_TOKEN_NAME
    symbol = CREDIT_TOKEN_SYMBOL
    decimals = CREDIT_DECIMALS

    # ------------------------- Reads -------------------------
    def balance_of(self, session: Session, account: str) -> int:
        row = session.get(CreditBalance, normalize_address(account, "account"))
        return row.balance if row else 0

    def allowance(self, session: Session, owner: str, spender: str) -> int:
        row = session.get(
            CreditAllowance,
            (normalize_address(owner, "owner"), normalize_address(spender, "spender")),
        )
        return row.amount if row else 0

    def total_supply(self, session: Session) -> int:
        return storage.read_counter(session, storage.TOTAL_SUPPLY)

    def total_burned(self, session: Session) -> int:
        return storage.read_counter(session, storage.TOTAL_BURNED)

    def owner(self, session: Session) -> str:
        return storage.get_setting(session, storage.OWNER)

    def is_minter(self, session: Session, account: str) -> bool:
        return session.get(MinterGrant, normalize_address(account, "account")) is not None

    def minters(self, session: Session) -> List[str]:
        return [g.address for g in session.query(MinterGrant).order_by(MinterGrant.address).all()]

    # ------------------------- Internal bookkeeping -------------------------
    def _balance_row(self, session: Session, account: str) -> CreditBalance:
        row = (
            session.query(CreditBalance)
            .filter_by(address=account)
            .with_for_update()
            .first()
        )
        if row is None:
            row = CreditBalance(address=account, balance=0)
            session.add(row)
        return row

    def _debit(self, tx: LedgerTransaction, account: str, amount: int) -> None:
        row = self._balance_row(tx.session, account)
        if row.balance < amount:
            raise InsufficientBalanceError(
                f"{account} holds {row.balance}, needs {amount}"
            )
        row.balance = row.balance - amount
        row.updated_at = tx.now

    def _credit(self, tx: LedgerTransaction, account: str, amount: int) -> None:
        row = self._balance_row(tx.session, account)
        row.balance = row.balance + amount
        row.updated_at = tx.now

    def _move(self, tx: LedgerTransaction, sender: str, to: str, amount: int) -> None:
        self._debit(tx, sender, amount)
        self._credit(tx, to, amount)
        tx.emit(Transfer(from_=sender, to=to, amount=amount))

    def _spend_allowance(self, tx: LedgerTransaction, owner: str, spender: str, amount: int) -> None:
        row = tx.session.get(CreditAllowance, (owner, spender))
        current = row.amount if row else 0
        if current < amount:
            raise InsufficientAllowanceError(
                f"{spender} may spend {current} of {owner}'s credits, needs {amount}"
            )
        row.amount = current - amount

    def _burn(self, tx: LedgerTransaction, owner: str, amount: int) -> None:
        self._debit(tx, owner, amount)
        storage.adjust_counter(tx.session, storage.TOTAL_SUPPLY, -amount)
        storage.adjust_counter(tx.session, storage.TOTAL_BURNED, amount)
        tx.emit(Transfer(from_=owner, to=NULL_ADDRESS, amount=amount))

    # ------------------------- Mutations -------------------------
    def mint(self, tx: LedgerTransaction, caller: str, to: str, amount: int) -> None:
        """Creates ``amount`` credits for ``to``. Minters only."""
        if tx.session.get(MinterGrant, caller) is None:
            raise UnauthorizedError(f"{caller} is not an authorised minter")
        to = _recipient(to)
        require_positive_amount(amount)
        self._credit(tx, to, amount)
        storage.adjust_counter(tx.session, storage.TOTAL_SUPPLY, amount)
        tx.emit(Transfer(from_=NULL_ADDRESS, to=to, amount=amount))
        logger.info(f"🪙 Minted {amount} to {to} (minter {caller})")

    def transfer(self, tx: LedgerTransaction, caller: str, to: str, amount: int) -> None:
        to = _recipient(to)
        require_positive_amount(amount)
        self._move(tx, caller, to, amount)

    def transfer_from(self, tx: LedgerTransaction, caller: str, owner: str, to: str, amount: int) -> None:
        """Moves ``owner``'s credits using the allowance granted to ``caller``."""
        owner = normalize_address(owner, "owner")
        to = _recipient(to)
        require_positive_amount(amount)
        self._spend_allowance(tx, owner, caller, amount)
        self._move(tx, owner, to, amount)

    def approve(self, tx: LedgerTransaction, caller: str, spender: str, amount: int) -> None:
        """Sets (never adds to) ``spender``'s allowance over the caller's credits."""
        spender = normalize_address(spender, "spender")
        if spender == NULL_ADDRESS:
            raise InvalidArgumentError("Spender cannot be the null address")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidArgumentError("amount must be a non-negative integer")
        row = tx.session.get(CreditAllowance, (caller, spender))
        if row is None:
            row = CreditAllowance(owner=caller, spender=spender, amount=amount)
            tx.session.add(row)
        else:
            row.amount = amount
        tx.emit(Approval(owner=caller, spender=spender, amount=amount))

    def burn(self, tx: LedgerTransaction, caller: str, amount: int) -> None:
        require_positive_amount(amount)
        self._burn(tx, caller, amount)

    def burn_from(self, tx: LedgerTransaction, caller: str, owner: str, amount: int) -> None:
        owner = normalize_address(owner, "owner")
        require_positive_amount(amount)
        self._spend_allowance(tx, owner, caller, amount)
        self._burn(tx, owner, amount)

    def burn_expired(self, tx: LedgerTransaction, caller: str, holder: str, amount: int) -> None:
        """Burns lapsed credits without an allowance. Only the expiration registry may call this."""
        if caller != EXPIRATION_ADDRESS:
            raise UnauthorizedError(f"{caller} may not expire credits")
        require_positive_amount(amount)
        self._burn(tx, normalize_address(holder, "holder"), amount)

    def batch_transfer(self, tx: LedgerTransaction, caller: str, recipients: Sequence[str], amounts: Sequence[int]) -> None:
        """Transfers to every recipient, or to none of them."""
        if not recipients or len(recipients) != len(amounts):
            raise InvalidArgumentError("recipients and amounts must be non-empty and of equal length")
        for to, amount in zip(recipients, amounts):
            self.transfer(tx, caller, to, amount)

    # ------------------------- Minter set & ownership -------------------------
    def _grant_minter(self, tx: LedgerTransaction, minter: str) -> None:
        if tx.session.get(MinterGrant, minter) is None:
            tx.session.add(MinterGrant(address=minter, granted_at=tx.now))

    def set_minter(self, tx: LedgerTransaction, caller: str, new_minter: str) -> None:
        """Replaces the whole minter set with ``{new_minter}``."""
        require_owner(tx, caller)
        new_minter = _recipient(new_minter)
        for grant in tx.session.query(MinterGrant).all():
            if grant.address != new_minter:
                tx.session.delete(grant)
        self._grant_minter(tx, new_minter)
        tx.emit(MinterUpdated(new_minter=new_minter, enabled=True))
        logger.info(f"Minter set replaced by {{{new_minter}}}")

    def add_minter(self, tx: LedgerTransaction, caller: str, minter: str) -> None:
        require_owner(tx, caller)
        minter = _recipient(minter)
        self._grant_minter(tx, minter)
        tx.emit(MinterUpdated(new_minter=minter, enabled=True))
        logger.info(f"Minter {minter} added")

    def remove_minter(self, tx: LedgerTransaction, caller: str, minter: str) -> None:
        require_owner(tx, caller)
        minter = normalize_address(minter, "minter")
        grant = tx.session.get(MinterGrant, minter)
        if grant is not None:
            tx.session.delete(grant)
        tx.emit(MinterUpdated(new_minter=minter, enabled=False))
        logger.info(f"Minter {minter} removed")

    def transfer_ownership(self, tx: LedgerTransaction, caller: str, new_owner: str) -> None:
        require_owner(tx, caller)
        new_owner = _recipient(new_owner)
        storage.put_setting(tx.session, storage.OWNER, new_owner)
        tx.emit(OwnershipTransferred(previous_owner=caller, new_owner=new_owner))
        logger.info(f"Platform ownership moved from {caller} to {new_owner}")


# Singleton instance
credit_token = CreditToken()
