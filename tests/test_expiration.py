"""
Tests for credit batch expiration.
"""
import pytest

from conftest import ALICE, BOB, COMPANY, COMPANY_B, OWNER, T0, VERIFIER_1, credits, read
from ecocred.constants import SECONDS_PER_DAY, SECONDS_PER_YEAR, VERIFICATION_ADDRESS
from ecocred.errors import InvalidArgumentError, NotFoundError, UnauthorizedError
from ecocred.systems.chain import get_events, ledger_transaction, verify_chain
from ecocred.systems.credit_token import credit_token
from ecocred.systems.expiration import expiration_registry
from ecocred.systems.verification import verification_ledger
from ecocred.tasks import expire_due_credits_now

AWARDED_AT = T0 + 60
LAPSED = AWARDED_AT + SECONDS_PER_YEAR


def award(company=COMPANY, actual=480, approved=True, now=AWARDED_AT):
    with ledger_transaction(now=now) as tx:
        action_id = verification_ledger.log_eco_action(tx, company, "Wetland restoration", "", actual, "", "nature")
    with ledger_transaction(now=now) as tx:
        verification_ledger.verify_action(tx, VERIFIER_1, action_id, approved, actual if approved else 0)
    return action_id


def expire(holder=COMPANY, now=LAPSED):
    with ledger_transaction(now=now) as tx:
        return expiration_registry.check_and_expire(tx, BOB, holder)


def status(holder=COMPANY, now=LAPSED):
    return read(lambda s: expiration_registry.get_expiration_status(s, holder, now))


def balance(address):
    return read(lambda s: credit_token.balance_of(s, address))


def test_approved_award_opens_a_batch(verifiers):
    action_id = award()
    batch = read(lambda s: expiration_registry.get_credit_batch(s, COMPANY, 0, AWARDED_AT))
    assert batch["amount"] == str(credits(480))
    assert batch["expires_at"] == LAPSED
    assert batch["source_action_id"] == action_id
    assert batch["can_expire"] is False
    assert status(now=AWARDED_AT)["next_expiration_timestamp"] == LAPSED


def test_rejected_action_opens_no_batch(verifiers):
    award(approved=False)
    assert status()["total_batches"] == 0
    assert status()["next_expiration_timestamp"] == 0


def test_nothing_expires_before_the_deadline(verifiers):
    award()
    events_before = len(get_events(limit=200))
    assert expire(now=LAPSED - 1) == 0
    assert balance(COMPANY) == credits(480)
    assert len(get_events(limit=200)) == events_before


def test_lapsed_batch_is_burned_once(verifiers):
    award()
    supply_before = read(credit_token.total_supply)
    assert expire() == credits(480)

    assert balance(COMPANY) == 0
    assert read(credit_token.total_supply) == supply_before - credits(480)
    assert read(credit_token.total_burned) == credits(480)
    assert status() == {
        "holder": COMPANY,
        "total_batches": 1,
        "active_batches": 0,
        "expired_batches": 1,
        "total_expired_amount": str(credits(480)),
        "expirable_amount": "0",
        "next_expiration_timestamp": 0,
    }
    [event] = get_events(event_type="CreditsExpired")
    assert event["payload"]["holder"] == COMPANY
    assert event["payload"]["amount"] == str(credits(480))
    assert event["payload"]["batches"] == 1

    assert expire(now=LAPSED + SECONDS_PER_DAY) == 0
    assert len(get_events(event_type="CreditsExpired")) == 1
    assert verify_chain()["valid"] is True


def test_expiry_is_capped_at_the_wallet_balance(verifiers):
    award()
    with ledger_transaction(now=AWARDED_AT + 1) as tx:
        credit_token.transfer(tx, COMPANY, ALICE, credits(400))

    assert expire() == credits(80)
    assert balance(COMPANY) == 0
    assert balance(ALICE) == credits(400)
    batch = read(lambda s: expiration_registry.get_credit_batch(s, COMPANY, 0, LAPSED))
    assert batch["expired"] is True
    assert batch["expired_amount"] == str(credits(80))


def test_only_lapsed_batches_expire(verifiers):
    award()
    award(actual=20, now=AWARDED_AT + 30 * SECONDS_PER_DAY)
    assert status()["expirable_amount"] == str(credits(480))

    assert expire() == credits(480)
    assert balance(COMPANY) == credits(20)
    remaining = status()
    assert (remaining["active_batches"], remaining["expired_batches"]) == (1, 1)
    assert remaining["next_expiration_timestamp"] == LAPSED + 30 * SECONDS_PER_DAY


def test_expiration_period_applies_to_new_batches(verifiers):
    award()
    with ledger_transaction(now=AWARDED_AT) as tx:
        expiration_registry.set_expiration_period(tx, OWNER, 30 * SECONDS_PER_DAY)
    award(company=COMPANY_B)
    assert read(lambda s: expiration_registry.get_credit_batch(s, COMPANY, 0, LAPSED))["expires_at"] == LAPSED
    expires_b = read(lambda s: expiration_registry.get_credit_batch(s, COMPANY_B, 0, LAPSED))["expires_at"]
    assert expires_b == AWARDED_AT + 30 * SECONDS_PER_DAY


@pytest.mark.parametrize("caller, seconds, error", [
    (ALICE, SECONDS_PER_DAY, UnauthorizedError),
    (OWNER, 0, InvalidArgumentError),
    (OWNER, True, InvalidArgumentError),
])
def test_expiration_period_validation(app, caller, seconds, error):
    with pytest.raises(error):
        with ledger_transaction(now=T0) as tx:
            expiration_registry.set_expiration_period(tx, caller, seconds)
    assert read(expiration_registry.expiration_period) == SECONDS_PER_YEAR


def test_batches_are_recorded_by_minters_or_owner_only(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            expiration_registry.record_batch(tx, ALICE, ALICE, credits(1))
    with ledger_transaction(now=T0) as tx:
        assert expiration_registry.record_batch(tx, VERIFICATION_ADDRESS, ALICE, credits(1)) == 0
    with ledger_transaction(now=T0) as tx:
        assert expiration_registry.record_batch(tx, OWNER, ALICE, credits(2)) == 1
    assert status(ALICE)["total_batches"] == 2


def test_forced_burn_is_reserved_for_the_registry(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            credit_token.burn_expired(tx, OWNER, ALICE, 1)


def test_unknown_batch_is_not_found(app):
    with pytest.raises(NotFoundError):
        read(lambda s: expiration_registry.get_credit_batch(s, COMPANY, 0, T0))


def test_sweep_expires_every_due_holder(verifiers):
    award()
    award(company=COMPANY_B, actual=50)
    assert read(lambda s: expiration_registry.holders_due(s, LAPSED - 1)) == []
    assert expire_due_credits_now(now=LAPSED) == 2
    assert balance(COMPANY) == 0
    assert balance(COMPANY_B) == 0
    assert read(lambda s: expiration_registry.holders_due(s, LAPSED)) == []
