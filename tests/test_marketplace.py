"""
Tests for the fixed-price credit marketplace.
"""
import pytest

from conftest import ALICE, BOB, CAROL, OWNER, T0, credits, fund, read
from ecocred.constants import GOVERNANCE_ADDRESS, MARKETPLACE_ADDRESS, NULL_ADDRESS, ListingStatus
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
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token
from ecocred.systems.marketplace import marketplace, platform_fee, total_price

PRICE = 10 ** 15  # wei per whole credit


def list_credits(seller=ALICE, amount=credits(100), price=PRICE, allowance=None):
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, seller, MARKETPLACE_ADDRESS, amount if allowance is None else allowance)
    with ledger_transaction(now=T0) as tx:
        return marketplace.create_listing(tx, seller, amount, price)


def buy(listing_id, amount, payment, buyer=BOB):
    with ledger_transaction(now=T0 + 10) as tx:
        return marketplace.purchase(tx, buyer, listing_id, amount, payment)


def native(address):
    return read(lambda s: marketplace.native_balance_of(s, address))


def listing(listing_id):
    return read(lambda s: marketplace.get_listing(s, listing_id))


def test_price_helpers_floor_divide():
    assert total_price(credits(50), PRICE) == 5 * 10 ** 16
    assert total_price(1, PRICE) == 0
    assert platform_fee(5 * 10 ** 16, 250) == 125 * 10 ** 13


def test_create_listing_requires_balance_and_allowance(app):
    fund(ALICE, credits(10))
    with pytest.raises(InsufficientBalanceError):
        list_credits(amount=credits(11))
    with pytest.raises(InsufficientAllowanceError):
        list_credits(amount=credits(10), allowance=credits(5))
    assert read(lambda s: marketplace.active_listings(s)) == []


@pytest.mark.parametrize("amount, price", [(0, PRICE), (credits(1), 0)])
def test_create_listing_rejects_zero_values(app, amount, price):
    fund(ALICE, credits(10))
    with pytest.raises(InvalidArgumentError):
        list_credits(amount=amount, price=price)


def test_partial_purchase_settles_credits_and_payments(app):
    fund(ALICE, credits(100))
    listing_id = list_credits()
    result = buy(listing_id, credits(50), 5 * 10 ** 16)

    assert read(lambda s: credit_token.balance_of(s, BOB)) == credits(50)
    assert read(lambda s: credit_token.balance_of(s, ALICE)) == credits(50)
    data = listing(listing_id)
    assert data["remaining_amount"] == str(credits(50))
    assert data["status"] == ListingStatus.ACTIVE.value
    assert result["fee"] == str(125 * 10 ** 13)
    assert result["refund"] == "0"
    assert native(ALICE) == 4875 * 10 ** 13
    assert native(OWNER) == 125 * 10 ** 13


def test_purchase_of_remaining_amount_marks_listing_sold(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    buy(listing_id, credits(10), 10 ** 16)
    assert listing(listing_id)["status"] == ListingStatus.SOLD.value
    with pytest.raises(NotActiveError):
        buy(listing_id, credits(1), 10 ** 16)


def test_overpayment_is_refunded_to_buyer(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    result = buy(listing_id, credits(1), 10 ** 15 + 7)
    assert result["refund"] == "7"
    assert native(BOB) == 7


def test_underpayment_is_rejected_without_side_effects(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    with pytest.raises(InsufficientPaymentError):
        buy(listing_id, credits(2), 2 * 10 ** 15 - 1)
    assert read(lambda s: credit_token.balance_of(s, BOB)) == 0
    assert listing(listing_id)["remaining_amount"] == str(credits(10))
    assert native(ALICE) == 0


def test_cannot_buy_more_than_remaining(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    with pytest.raises(InvalidArgumentError):
        buy(listing_id, credits(11), 10 ** 17)


def test_purchase_of_unknown_listing_is_not_found(app):
    with pytest.raises(NotFoundError):
        buy(42, credits(1), 10 ** 15)


def test_purchase_fails_when_seller_spent_the_credits(app):
    """Sellers keep custody, so a listing can outlive the balance behind it."""
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer(tx, ALICE, CAROL, credits(10))
    with pytest.raises(InsufficientBalanceError):
        buy(listing_id, credits(5), 10 ** 16)
    assert listing(listing_id)["remaining_amount"] == str(credits(10))


def test_only_seller_can_cancel(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            marketplace.cancel_listing(tx, BOB, listing_id)
    with ledger_transaction(now=T0) as tx:
        marketplace.cancel_listing(tx, ALICE, listing_id)
    assert listing(listing_id)["status"] == ListingStatus.CANCELLED.value
    with pytest.raises(NotActiveError):
        with ledger_transaction(now=T0) as tx:
            marketplace.cancel_listing(tx, ALICE, listing_id)
    with pytest.raises(NotActiveError):
        buy(listing_id, credits(1), 10 ** 15)


def test_active_listings_filters_by_seller(app):
    fund(ALICE, credits(10))
    fund(CAROL, credits(10))
    first = list_credits(seller=ALICE, amount=credits(5))
    second = list_credits(seller=CAROL, amount=credits(5))
    assert [l["id"] for l in read(lambda s: marketplace.active_listings(s))] == [first, second]
    assert [l["id"] for l in read(lambda s: marketplace.active_listings(s, seller=CAROL))] == [second]


def test_withdraw_native_proceeds(app):
    fund(ALICE, credits(10))
    listing_id = list_credits(amount=credits(10))
    buy(listing_id, credits(10), 10 ** 16)
    earned = native(ALICE)
    with pytest.raises(InsufficientBalanceError):
        with ledger_transaction(now=T0) as tx:
            marketplace.withdraw_native(tx, ALICE, earned + 1)
    with ledger_transaction(now=T0) as tx:
        assert marketplace.withdraw_native(tx, ALICE, earned) == 0
    assert native(ALICE) == 0


def test_platform_fee_bounds_and_owner_gate(app):
    with ledger_transaction(now=T0) as tx:
        marketplace.set_platform_fee(tx, OWNER, 1000)
    assert read(marketplace.platform_fee_bps) == 1000
    with pytest.raises(InvalidArgumentError):
        with ledger_transaction(now=T0) as tx:
            marketplace.set_platform_fee(tx, OWNER, 1001)
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            marketplace.set_platform_fee(tx, ALICE, 0)


def test_batch_create_listings_creates_each_listing(app):
    fund(ALICE, credits(30))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, MARKETPLACE_ADDRESS, credits(30))
    with ledger_transaction(now=T0) as tx:
        ids = marketplace.batch_create_listings(tx, ALICE, [credits(10), credits(20)], [PRICE, 2 * PRICE])
    assert ids == [1, 2]
    assert [l["price_per_credit"] for l in read(lambda s: marketplace.active_listings(s, seller=ALICE))] == [
        str(PRICE), str(2 * PRICE)
    ]


@pytest.mark.parametrize("amounts, prices", [
    ([], []),
    ([credits(1)], [PRICE, PRICE]),
    ([credits(1), credits(2)], [PRICE, 0]),
])
def test_batch_create_listings_is_all_or_nothing(app, amounts, prices):
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, MARKETPLACE_ADDRESS, credits(10))
    with pytest.raises(InvalidArgumentError):
        with ledger_transaction(now=T0) as tx:
            marketplace.batch_create_listings(tx, ALICE, amounts, prices)
    assert read(lambda s: marketplace.active_listings(s)) == []


def test_fees_follow_the_fee_recipient_not_ownership(app):
    assert read(marketplace.fee_recipient) == OWNER
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer_ownership(tx, OWNER, GOVERNANCE_ADDRESS)
    fund(ALICE, credits(100))
    buy(list_credits(), credits(50), 5 * 10 ** 16)
    assert native(OWNER) == 125 * 10 ** 13
    assert native(GOVERNANCE_ADDRESS) == 0


def test_set_fee_recipient_redirects_future_fees(app):
    fund(ALICE, credits(100))
    listing_id = list_credits()
    buy(listing_id, credits(50), 5 * 10 ** 16)
    with ledger_transaction(now=T0) as tx:
        marketplace.set_fee_recipient(tx, OWNER, CAROL)
    buy(listing_id, credits(50), 5 * 10 ** 16)
    assert native(OWNER) == 125 * 10 ** 13
    assert native(CAROL) == 125 * 10 ** 13


def test_set_fee_recipient_is_owner_only_and_rejects_null(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            marketplace.set_fee_recipient(tx, ALICE, ALICE)
    with pytest.raises(InvalidRecipientError):
        with ledger_transaction(now=T0) as tx:
            marketplace.set_fee_recipient(tx, OWNER, NULL_ADDRESS)
    assert read(marketplace.fee_recipient) == OWNER
