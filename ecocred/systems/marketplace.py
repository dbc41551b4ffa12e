# ecocred/systems/marketplace.py
"""
Fixed-price credit marketplace.

Sellers keep custody of their credits and grant the marketplace an allowance;
a purchase pulls credits straight from the seller with ``transfer_from``.
Native payments are settled into withdrawable NativeBalance rows: proceeds to
the seller, the platform fee to the fee recipient (the owner unless changed),
overpayment back to the buyer.
"""
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy.orm import Session

from ecocred.constants import (
    BPS_DENOMINATOR,
    MARKETPLACE_ADDRESS,
    MAX_PLATFORM_FEE_BPS,
    NULL_ADDRESS,
    ONE_CREDIT,
    ListingStatus,
)
from ecocred.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InsufficientPaymentError,
    InvalidArgumentError,
    InvalidRecipientError,
    NotActiveError,
    NotFoundError,
    UnauthorizedError,
)
from ecocred.events import (
    ListingCancelled,
    ListingCreated,
    NativeWithdrawn,
    ParameterUpdated,
    PurchaseExecuted,
)
from ecocred.models import Listing, NativeBalance
from ecocred.systems import storage
from ecocred.systems.access_control import require_owner
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token, require_positive_amount
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


def total_price(amount: int, price_per_credit: int) -> int:
    """Native currency owed for ``amount`` fixed-point credits."""
    return amount * price_per_credit // ONE_CREDIT


def platform_fee(total: int, fee_bps: int) -> int:
    return total * fee_bps // BPS_DENOMINATOR


class Marketplace:
    address = MARKETPLACE_ADDRESS

    # ------------------------- Native balances -------------------------
    def _native_row(self, session: Session, account: str) -> NativeBalance:
        row = session.query(NativeBalance).filter_by(address=account).with_for_update().first()
        if row is None:
            row = NativeBalance(address=account, balance=0)
            session.add(row)
        return row

    def _pay(self, session: Session, account: str, amount: int) -> None:
        if amount <= 0:
            return
        row = self._native_row(session, account)
        row.balance = row.balance + amount

    def native_balance_of(self, session: Session, account: str) -> int:
        row = session.get(NativeBalance, normalize_address(account, "account"))
        return row.balance if row else 0

    def withdraw_native(self, tx: LedgerTransaction, caller: str, amount: int) -> int:
        require_positive_amount(amount)
        row = self._native_row(tx.session, caller)
        if row.balance < amount:
            raise InsufficientBalanceError(f"{caller} has {row.balance} wei available, needs {amount}")
        row.balance = row.balance - amount
        tx.emit(NativeWithdrawn(account=caller, amount=amount))
        logger.info(f"💸 {caller} withdrew {amount} wei")
        return row.balance

    # ------------------------- Listings -------------------------
    def _get_listing(self, session: Session, listing_id: int, lock: bool = False) -> Listing:
        query = session.query(Listing).filter_by(id=listing_id)
        if lock:
            query = query.with_for_update()
        listing = query.first()
        if listing is None:
            raise NotFoundError(f"Listing {listing_id} does not exist")
        return listing

    def create_listing(self, tx: LedgerTransaction, caller: str, amount: int, price_per_credit: int) -> int:
        require_positive_amount(amount)
        require_positive_amount(price_per_credit, "price_per_credit")
        balance = credit_token.balance_of(tx.session, caller)
        if balance < amount:
            raise InsufficientBalanceError(f"{caller} holds {balance}, cannot list {amount}")
        allowance = credit_token.allowance(tx.session, caller, self.address)
        if allowance < amount:
            raise InsufficientAllowanceError(
                f"Marketplace allowance is {allowance}; approve at least {amount} before listing"
            )

        listing_id = storage.next_id(tx.session, storage.LISTING_IDS)
        tx.session.add(Listing(
            id=listing_id,
            seller=caller,
            original_amount=amount,
            remaining_amount=amount,
            price_per_credit=price_per_credit,
            status=ListingStatus.ACTIVE,
            created_at=tx.now,
            updated_at=tx.now,
        ))
        tx.emit(ListingCreated(listing_id=listing_id, seller=caller, amount=amount, price_per_credit=price_per_credit))
        logger.info(f"🏷️ Listing {listing_id} created by {caller}: {amount} at {price_per_credit} wei/credit")
        return listing_id

    def batch_create_listings(
        self, tx: LedgerTransaction, caller: str, amounts: Sequence[int], prices: Sequence[int]
    ) -> List[int]:
        """Creates one listing per (amount, price) pair, or none of them."""
        if not amounts or len(amounts) != len(prices):
            raise InvalidArgumentError("amounts and prices must be non-empty and of equal length")
        return [self.create_listing(tx, caller, amount, price) for amount, price in zip(amounts, prices)]

    def purchase(self, tx: LedgerTransaction, caller: str, listing_id: int, amount: int, payment: int) -> Dict[str, Any]:
        """Buys ``amount`` credits from a listing, paying ``payment`` wei."""
        listing = self._get_listing(tx.session, listing_id, lock=True)
        if listing.status != ListingStatus.ACTIVE:
            raise NotActiveError(f"Listing {listing_id} is {listing.status.value}")
        require_positive_amount(amount)
        if amount > listing.remaining_amount:
            raise InvalidArgumentError(
                f"Listing {listing_id} has {listing.remaining_amount} remaining, cannot buy {amount}"
            )
        if isinstance(payment, bool) or not isinstance(payment, int) or payment < 0:
            raise InvalidArgumentError("payment must be a non-negative integer")

        total = total_price(amount, listing.price_per_credit)
        if payment < total:
            raise InsufficientPaymentError(f"Payment {payment} is below the total price {total}")

        credit_token.transfer_from(tx, self.address, listing.seller, caller, amount)

        fee = platform_fee(total, storage.get_setting(tx.session, storage.MARKETPLACE_FEE_BPS))
        self._pay(tx.session, self.fee_recipient(tx.session), fee)
        self._pay(tx.session, listing.seller, total - fee)
        self._pay(tx.session, caller, payment - total)

        listing.remaining_amount = listing.remaining_amount - amount
        if listing.remaining_amount == 0:
            listing.status = ListingStatus.SOLD
        listing.updated_at = tx.now

        tx.emit(PurchaseExecuted(listing_id=listing_id, buyer=caller, amount=amount, total_price=total))
        logger.info(f"🛒 {caller} bought {amount} from listing {listing_id} for {total} wei (fee {fee})")
        return {
            "listing": listing.to_dict(),
            "total_price": str(total),
            "fee": str(fee),
            "refund": str(payment - total),
        }

    def cancel_listing(self, tx: LedgerTransaction, caller: str, listing_id: int) -> None:
        listing = self._get_listing(tx.session, listing_id, lock=True)
        if listing.seller != caller:
            raise UnauthorizedError(f"Only the seller may cancel listing {listing_id}")
        if listing.status != ListingStatus.ACTIVE:
            raise NotActiveError(f"Listing {listing_id} is {listing.status.value}")
        listing.status = ListingStatus.CANCELLED
        listing.updated_at = tx.now
        tx.emit(ListingCancelled(listing_id=listing_id, seller=caller))
        logger.info(f"Listing {listing_id} cancelled by {caller}")

    def set_platform_fee(self, tx: LedgerTransaction, caller: str, fee_bps: int) -> None:
        require_owner(tx, caller)
        if isinstance(fee_bps, bool) or not isinstance(fee_bps, int) or not 0 <= fee_bps <= MAX_PLATFORM_FEE_BPS:
            raise InvalidArgumentError(f"fee_bps must be between 0 and {MAX_PLATFORM_FEE_BPS}")
        storage.put_setting(tx.session, storage.MARKETPLACE_FEE_BPS, fee_bps)
        tx.emit(ParameterUpdated(contract="marketplace", name="platform_fee_bps", value=str(fee_bps)))
        logger.info(f"Platform fee set to {fee_bps} bps")

    def set_fee_recipient(self, tx: LedgerTransaction, caller: str, recipient: str) -> None:
        """Redirects future platform fees. Balances already credited stay where they are."""
        require_owner(tx, caller)
        recipient = normalize_address(recipient, "recipient")
        if recipient == NULL_ADDRESS:
            raise InvalidRecipientError("Fee recipient cannot be the null address")
        storage.put_setting(tx.session, storage.FEE_RECIPIENT, recipient)
        tx.emit(ParameterUpdated(contract="marketplace", name="fee_recipient", value=recipient))
        logger.info(f"Platform fees now go to {recipient}")

    # ------------------------- Reads -------------------------
    def get_listing(self, session: Session, listing_id: int) -> Dict[str, Any]:
        return self._get_listing(session, listing_id).to_dict()

    def active_listings(self, session: Session, seller: str = None) -> List[Dict[str, Any]]:
        query = session.query(Listing).filter_by(status=ListingStatus.ACTIVE)
        if seller:
            query = query.filter_by(seller=normalize_address(seller, "seller"))
        return [l.to_dict() for l in query.order_by(Listing.id.asc()).all()]

    def platform_fee_bps(self, session: Session) -> int:
        return storage.get_setting(session, storage.MARKETPLACE_FEE_BPS)

    def fee_recipient(self, session: Session) -> str:
        return storage.get_setting(session, storage.FEE_RECIPIENT, default="") or storage.get_setting(session, storage.OWNER)


# Singleton instance
marketplace = Marketplace()
