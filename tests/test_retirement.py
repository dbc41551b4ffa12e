"""
Tests for certificate-backed credit retirement.
"""
import pytest

from conftest import ALICE, BOB, T0, credits, fund, read
from ecocred.errors import InsufficientBalanceError, InvalidArgumentError, NotFoundError
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token
from ecocred.systems.retirement import retirement_registry


def retire(amount, certificate_id, retirer=ALICE, reason="Scope 2 offset"):
    with ledger_transaction(now=T0) as tx:
        return retirement_registry.retire_credits(tx, retirer, amount, reason, certificate_id)


def test_retirement_burns_and_records(app):
    fund(ALICE, credits(10))
    retirement_id = retire(credits(4), "CERT-2024-001")

    assert read(lambda s: credit_token.balance_of(s, ALICE)) == credits(6)
    assert read(credit_token.total_supply) == credits(6)
    assert read(retirement_registry.total_retired) == credits(4)
    record = read(lambda s: retirement_registry.get_retirement(s, retirement_id))
    assert record["certificate_id"] == "CERT-2024-001"
    assert record["amount"] == str(credits(4))
    assert record["retired_at"] == T0


def test_certificate_ids_are_unique(app):
    fund(ALICE, credits(10))
    fund(BOB, credits(10))
    retire(credits(1), "CERT-1")
    with pytest.raises(InvalidArgumentError):
        retire(credits(1), "CERT-1", retirer=BOB)
    assert read(lambda s: credit_token.balance_of(s, BOB)) == credits(10)


@pytest.mark.parametrize("certificate_id", ["", "   "])
def test_certificate_id_is_required(app, certificate_id):
    fund(ALICE, credits(1))
    with pytest.raises(InvalidArgumentError):
        retire(credits(1), certificate_id)


def test_cannot_retire_more_than_balance(app):
    fund(ALICE, credits(1))
    with pytest.raises(InsufficientBalanceError):
        retire(credits(2), "CERT-X")
    assert read(retirement_registry.total_retired) == 0


def test_retirements_are_listed_per_retirer(app):
    fund(ALICE, credits(10))
    retire(credits(1), "A-1")
    retire(credits(2), "A-2")
    rows = read(lambda s: retirement_registry.retirements_of(s, ALICE))
    assert [r["certificate_id"] for r in rows] == ["A-1", "A-2"]
    assert read(lambda s: retirement_registry.retired_by(s, ALICE)) == credits(3)


def test_unknown_retirement_is_not_found(app):
    with pytest.raises(NotFoundError):
        read(lambda s: retirement_registry.get_retirement(s, 7))
