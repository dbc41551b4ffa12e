"""
Tests for role assignment.
"""
import pytest

from conftest import ALICE, BOB, OWNER, T0, grant, read
from ecocred.constants import Role
from ecocred.errors import InvalidArgumentError, UnauthorizedError
from ecocred.systems.access_control import access_control, parse_role
from ecocred.systems.chain import ledger_transaction


def role(address):
    return read(lambda s: access_control.role_of(s, address))


def test_owner_is_bootstrapped_as_admin(app):
    assert role(OWNER) == Role.ADMIN
    assert role(ALICE) == Role.NONE


@pytest.mark.parametrize("value, expected", [
    (Role.VERIFIER, Role.VERIFIER),
    ("verifier", Role.VERIFIER),
    ("ADMIN", Role.ADMIN),
    (3, Role.MODERATOR),
    ("2", Role.VERIFIER),
])
def test_parse_role_accepts_names_and_numbers(value, expected):
    assert parse_role(value) == expected


@pytest.mark.parametrize("value", ["auditor", 99, True, None])
def test_parse_role_rejects_malformed_input(value):
    with pytest.raises(InvalidArgumentError):
        parse_role(value)


def test_grant_overwrites_existing_role(app):
    grant(ALICE, Role.MODERATOR)
    grant(ALICE, Role.VERIFIER)
    assert role(ALICE) == Role.VERIFIER
    assert read(lambda s: access_control.has_role(s, ALICE, "verifier"))


def test_only_admin_can_grant(app):
    grant(ALICE, Role.VERIFIER)
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            access_control.grant_role(tx, ALICE, BOB, Role.VERIFIER)
    assert role(BOB) == Role.NONE


def test_admin_can_appoint_another_admin(app):
    grant(ALICE, Role.ADMIN)
    with ledger_transaction(now=T0) as tx:
        access_control.grant_role(tx, ALICE, BOB, Role.MODERATOR)
    assert role(BOB) == Role.MODERATOR


def test_revoke_resets_to_none(app):
    grant(ALICE, Role.VERIFIER)
    with ledger_transaction(now=T0) as tx:
        access_control.revoke_role(tx, OWNER, ALICE)
    assert role(ALICE) == Role.NONE
