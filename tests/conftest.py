"""
Shared fixtures for the ledger tests.

Every test gets a fresh in-memory database with the ledger bootstrapped at
``T0``. Contract calls run inside ``ledger_transaction``; reads go through
``read()`` so no ORM object outlives its session.
"""
import pytest

from ecocred.config import TestingConfig
from ecocred.constants import ONE_CREDIT, VERIFICATION_ADDRESS, Role
from ecocred.extensions import db
from ecocred.factory import create_app
from ecocred.models.db_utils import get_session_scope
from ecocred.systems.access_control import access_control
from ecocred.systems.bootstrap import bootstrap_ledger
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token

T0 = 1_700_000_000
DAY = 24 * 60 * 60

OWNER = TestingConfig.PLATFORM_OWNER_ADDRESS
COMPANY = "0x000000000000000000000000000000000000c001"
COMPANY_B = "0x000000000000000000000000000000000000c002"
VERIFIER_1 = "0x000000000000000000000000000000000000f001"
VERIFIER_2 = "0x000000000000000000000000000000000000f002"
VERIFIER_3 = "0x000000000000000000000000000000000000f003"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"
CAROL = "0x000000000000000000000000000000000000ca01"

API_HEADERS = {"X-API-Key": "test-api-key"}


def credits(n) -> int:
    """Whole credits to fixed-point units."""
    return int(n * ONE_CREDIT)


def read(fn):
    """Runs ``fn(session)`` in its own session scope and returns its result."""
    with get_session_scope() as session:
        return fn(session)


def fund(address: str, amount: int, now: int = T0) -> None:
    """Mints credits straight to ``address`` as the verification contract would."""
    with ledger_transaction(now=now) as tx:
        credit_token.mint(tx, VERIFICATION_ADDRESS, address, amount)


def grant(address: str, role: Role, now: int = T0) -> None:
    with ledger_transaction(now=now) as tx:
        access_control.grant_role(tx, OWNER, address, role)


def as_account(address: str, now: int = None) -> dict:
    headers = dict(API_HEADERS, **{"X-Account-Address": address})
    if now is not None:
        headers["X-Block-Timestamp"] = str(now)
    return headers


@pytest.fixture
def app():
    """Create a test Flask application with a bootstrapped ledger."""
    test_app = create_app(TestingConfig)
    with test_app.app_context():
        db.create_all()
        bootstrap_ledger(now=T0)
        yield test_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def verifiers(app):
    for verifier in (VERIFIER_1, VERIFIER_2, VERIFIER_3):
        grant(verifier, Role.VERIFIER)
    return (VERIFIER_1, VERIFIER_2, VERIFIER_3)
