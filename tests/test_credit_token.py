"""
Tests for the Carbon Credit fungible ledger.
"""
import pytest

from conftest import ALICE, BOB, CAROL, OWNER, T0, credits, fund, read
from ecocred.constants import NULL_ADDRESS, STAKING_ADDRESS, VERIFICATION_ADDRESS
from ecocred.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidArgumentError,
    InvalidRecipientError,
    UnauthorizedError,
)
from ecocred.models import LedgerEvent
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token


def balance(address):
    return read(lambda s: credit_token.balance_of(s, address))


def supply():
    return read(credit_token.total_supply)


def event_count():
    return read(lambda s: s.query(LedgerEvent).count())


@pytest.mark.parametrize("amount", [1, credits(1), credits(480), 2 ** 200])
def test_mint_increases_balance_and_supply_by_exactly_amount(app, amount):
    """Minting a > 0 adds exactly a to the recipient and to total supply."""
    before_balance, before_supply = balance(ALICE), supply()
    fund(ALICE, amount)
    assert balance(ALICE) == before_balance + amount
    assert supply() == before_supply + amount


def test_mint_to_null_address_fails(app):
    with pytest.raises(InvalidRecipientError):
        fund(NULL_ADDRESS, credits(1))
    assert supply() == 0


def test_mint_by_non_minter_is_unauthorized(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            credit_token.mint(tx, OWNER, ALICE, credits(1))


def test_mint_rejects_non_positive_amount(app):
    with pytest.raises(InvalidArgumentError):
        fund(ALICE, 0)


def test_transfer_conserves_balances(app):
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer(tx, ALICE, BOB, credits(4))
    assert balance(ALICE) + balance(BOB) == credits(10)
    assert balance(BOB) == credits(4)
    assert supply() == credits(10)


def test_transfer_more_than_balance_fails_and_changes_nothing(app):
    fund(ALICE, credits(1))
    events_before = event_count()
    with pytest.raises(InsufficientBalanceError):
        with ledger_transaction(now=T0) as tx:
            credit_token.transfer(tx, ALICE, BOB, credits(2))
    assert balance(ALICE) == credits(1)
    assert balance(BOB) == 0
    assert event_count() == events_before


def test_transfer_to_null_address_fails(app):
    fund(ALICE, credits(1))
    with pytest.raises(InvalidRecipientError):
        with ledger_transaction(now=T0) as tx:
            credit_token.transfer(tx, ALICE, NULL_ADDRESS, credits(1))


def test_transfer_from_decrements_allowance_by_exactly_amount(app):
    """approve(a) then transferFrom(b <= a) leaves an allowance of a - b."""
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, BOB, credits(5))
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer_from(tx, BOB, ALICE, CAROL, credits(3))
    assert read(lambda s: credit_token.allowance(s, ALICE, BOB)) == credits(2)
    assert balance(CAROL) == credits(3)
    assert balance(ALICE) == credits(7)


def test_transfer_from_beyond_allowance_fails(app):
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, BOB, credits(5))
    with pytest.raises(InsufficientAllowanceError):
        with ledger_transaction(now=T0) as tx:
            credit_token.transfer_from(tx, BOB, ALICE, CAROL, credits(5) + 1)
    assert read(lambda s: credit_token.allowance(s, ALICE, BOB)) == credits(5)


def test_approve_overwrites_previous_allowance(app):
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, BOB, credits(5))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, BOB, credits(2))
    assert read(lambda s: credit_token.allowance(s, ALICE, BOB)) == credits(2)


def test_burn_reduces_supply_and_tracks_total_burned(app):
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.burn(tx, ALICE, credits(4))
    assert balance(ALICE) == credits(6)
    assert supply() == credits(6)
    assert read(credit_token.total_burned) == credits(4)


def test_burn_from_consumes_allowance(app):
    fund(ALICE, credits(10))
    with ledger_transaction(now=T0) as tx:
        credit_token.approve(tx, ALICE, BOB, credits(3))
    with pytest.raises(InsufficientAllowanceError):
        with ledger_transaction(now=T0) as tx:
            credit_token.burn_from(tx, BOB, ALICE, credits(4))
    with ledger_transaction(now=T0) as tx:
        credit_token.burn_from(tx, BOB, ALICE, credits(3))
    assert balance(ALICE) == credits(7)
    assert read(lambda s: credit_token.allowance(s, ALICE, BOB)) == 0


def test_batch_transfer_is_all_or_nothing(app):
    fund(ALICE, credits(5))
    with pytest.raises(InsufficientBalanceError):
        with ledger_transaction(now=T0) as tx:
            credit_token.batch_transfer(tx, ALICE, [BOB, CAROL], [credits(3), credits(3)])
    assert balance(ALICE) == credits(5)
    assert balance(BOB) == 0

    with ledger_transaction(now=T0) as tx:
        credit_token.batch_transfer(tx, ALICE, [BOB, CAROL], [credits(3), credits(2)])
    assert (balance(BOB), balance(CAROL), balance(ALICE)) == (credits(3), credits(2), 0)


def test_batch_transfer_requires_matching_lists(app):
    with pytest.raises(InvalidArgumentError):
        with ledger_transaction(now=T0) as tx:
            credit_token.batch_transfer(tx, ALICE, [BOB], [])


def test_bootstrap_grants_verification_and_staking_minters(app):
    assert read(credit_token.minters) == sorted([VERIFICATION_ADDRESS, STAKING_ADDRESS])


def test_set_minter_replaces_the_whole_set(app):
    with ledger_transaction(now=T0) as tx:
        credit_token.set_minter(tx, OWNER, STAKING_ADDRESS)
    assert read(credit_token.minters) == [STAKING_ADDRESS]
    with pytest.raises(UnauthorizedError):
        fund(ALICE, credits(1))


def test_add_and_remove_minter(app):
    with ledger_transaction(now=T0) as tx:
        credit_token.add_minter(tx, OWNER, ALICE)
    assert read(lambda s: credit_token.is_minter(s, ALICE))
    with ledger_transaction(now=T0) as tx:
        credit_token.mint(tx, ALICE, BOB, credits(1))
    with ledger_transaction(now=T0) as tx:
        credit_token.remove_minter(tx, OWNER, ALICE)
    assert not read(lambda s: credit_token.is_minter(s, ALICE))


def test_minter_management_is_owner_only(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            credit_token.add_minter(tx, ALICE, ALICE)


def test_transfer_ownership_moves_owner_checks(app):
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer_ownership(tx, OWNER, ALICE)
    assert read(credit_token.owner) == ALICE
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            credit_token.add_minter(tx, OWNER, BOB)
