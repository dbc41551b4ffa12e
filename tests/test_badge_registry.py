"""
Tests for the achievement badge registry.
"""
import pytest

from conftest import ALICE, BOB, CAROL, OWNER, T0, read
from ecocred.constants import NULL_ADDRESS, VERIFICATION_ADDRESS
from ecocred.errors import InvalidArgumentError, InvalidRecipientError, NotFoundError, UnauthorizedError
from ecocred.systems.badge_registry import badge_registry
from ecocred.systems.chain import ledger_transaction


def mint(to=ALICE, caller=VERIFICATION_ADDRESS):
    with ledger_transaction(now=T0) as tx:
        return badge_registry.safe_mint(tx, caller, to)


def test_ids_are_sequential_from_one(app):
    assert read(badge_registry.next_id) == 1
    assert [mint(), mint(BOB), mint()] == [1, 2, 3]
    assert read(lambda s: badge_registry.tokens_of_owner(s, ALICE)) == [1, 3]
    assert read(lambda s: badge_registry.balance_of(s, BOB)) == 1


def test_only_owner_or_issuer_can_mint(app):
    assert mint(caller=OWNER) == 1
    with pytest.raises(UnauthorizedError):
        mint(caller=ALICE)


def test_mint_to_null_address_fails(app):
    with pytest.raises(InvalidRecipientError):
        mint(to=NULL_ADDRESS)


def test_token_uri_follows_base_uri(app):
    badge_id = mint()
    assert read(lambda s: badge_registry.token_uri(s, badge_id)) == "https://example.com/metadata/1"
    with ledger_transaction(now=T0) as tx:
        badge_registry.set_base_uri(tx, OWNER, "ipfs://badges/")
    assert read(lambda s: badge_registry.get_badge(s, badge_id))["token_uri"] == "ipfs://badges/1"


def test_transfer_by_owner_and_by_approved_address(app):
    badge_id = mint()
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            badge_registry.transfer_from(tx, BOB, ALICE, BOB, badge_id)

    with ledger_transaction(now=T0) as tx:
        badge_registry.approve(tx, ALICE, BOB, badge_id)
    with ledger_transaction(now=T0) as tx:
        badge_registry.transfer_from(tx, BOB, ALICE, CAROL, badge_id)
    assert read(lambda s: badge_registry.owner_of(s, badge_id)) == CAROL
    assert read(lambda s: badge_registry.get_approved(s, badge_id)) is None


def test_operator_can_transfer_every_badge(app):
    first, second = mint(), mint()
    with ledger_transaction(now=T0) as tx:
        badge_registry.set_approval_for_all(tx, ALICE, BOB, True)
    assert read(lambda s: badge_registry.is_approved_for_all(s, ALICE, BOB))
    for badge_id in (first, second):
        with ledger_transaction(now=T0) as tx:
            badge_registry.transfer_from(tx, BOB, ALICE, BOB, badge_id)
    assert read(lambda s: badge_registry.tokens_of_owner(s, BOB)) == [first, second]


def test_transfer_from_wrong_owner_or_to_null_fails(app):
    badge_id = mint()
    with pytest.raises(InvalidArgumentError):
        with ledger_transaction(now=T0) as tx:
            badge_registry.transfer_from(tx, ALICE, BOB, CAROL, badge_id)
    with pytest.raises(InvalidRecipientError):
        with ledger_transaction(now=T0) as tx:
            badge_registry.transfer_from(tx, ALICE, ALICE, NULL_ADDRESS, badge_id)


def test_unknown_badge_is_not_found(app):
    with pytest.raises(NotFoundError):
        read(lambda s: badge_registry.owner_of(s, 9))
