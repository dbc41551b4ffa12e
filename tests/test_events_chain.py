"""
Tests for the hash-chained event log and the event schemas.
"""
import pytest

from conftest import ALICE, BOB, T0, credits, fund, read
from ecocred.errors import InsufficientBalanceError
from ecocred.events import EVENT_TYPES, Transfer, parse_event
from ecocred.models import ChainBlock, LedgerEvent
from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import (
    GENESIS_PREVIOUS_HASH,
    get_blocks,
    get_events,
    last_block,
    ledger_transaction,
    merkle_root_hash,
    verify_chain,
)
from ecocred.systems.credit_token import credit_token
from ecocred.tasks import rebuild_leaderboard_now


def test_transfer_payload_uses_wire_names():
    payload = Transfer(from_=ALICE, to=BOB, amount=2 ** 130).payload()
    assert payload == {
        "schema_version": 1,
        "event_type": "Transfer",
        "from": ALICE,
        "to": BOB,
        "amount": str(2 ** 130),
    }
    assert parse_event(payload) == Transfer(from_=ALICE, to=BOB, amount=2 ** 130)


def test_event_types_are_unique():
    assert len(EVENT_TYPES) == len(set(EVENT_TYPES))
    assert "ActionFullyVerified" in EVENT_TYPES


def test_merkle_root_of_nothing_is_stable():
    assert merkle_root_hash([]) == merkle_root_hash([])
    assert merkle_root_hash([{"a": 1}]) != merkle_root_hash([{"a": 2}])


def test_bootstrap_leaves_a_valid_chain(app):
    blocks = get_blocks()
    assert blocks[0]["height"] == 0
    assert blocks[0]["previous_hash"] == GENESIS_PREVIOUS_HASH
    assert blocks[1]["previous_hash"] == blocks[0]["block_hash"]
    assert verify_chain() == {"valid": True, "height": 1, "problems": []}


def test_every_stored_payload_parses_back(app):
    fund(ALICE, credits(5))
    with ledger_transaction(now=T0) as tx:
        credit_token.transfer(tx, ALICE, BOB, credits(2))
    stored = get_events(limit=500)
    assert stored
    for row in stored:
        event = parse_event(row["payload"])
        assert event.event_type == row["event_type"]
        assert event.payload() == row["payload"]


def test_transaction_events_share_one_block_in_order(app):
    fund(ALICE, credits(5))
    with ledger_transaction(now=T0 + 5) as tx:
        credit_token.batch_transfer(tx, ALICE, [BOB, BOB], [credits(1), credits(2)])
    head = last_block()
    assert head["event_count"] == 2
    assert head["timestamp"] == T0 + 5
    amounts = read(lambda s: [
        row.payload["amount"]
        for row in s.query(LedgerEvent).filter_by(block_height=head["height"]).order_by(LedgerEvent.log_index)
    ])
    assert amounts == [str(credits(1)), str(credits(2))]


def test_failed_transaction_adds_no_block(app):
    height = last_block()["height"]
    with pytest.raises(InsufficientBalanceError):
        with ledger_transaction(now=T0) as tx:
            credit_token.transfer(tx, ALICE, BOB, 1)
    assert last_block()["height"] == height


def test_read_only_transaction_adds_no_block(app):
    height = last_block()["height"]
    with ledger_transaction(now=T0) as tx:
        credit_token.balance_of(tx.session, ALICE)
    assert last_block()["height"] == height


def test_event_paging_and_type_filter(app):
    fund(ALICE, credits(5))
    fund(BOB, credits(5))
    transfers = get_events(event_type="Transfer")
    assert len(transfers) == 2
    after_first = get_events(after=transfers[0]["id"], event_type="Transfer")
    assert [e["id"] for e in after_first] == [transfers[1]["id"]]


def test_tampered_payload_is_detected(app):
    fund(ALICE, credits(5))
    with get_session_scope() as session:
        row = session.query(LedgerEvent).filter_by(event_type="Transfer").first()
        row.payload = dict(row.payload, amount=str(credits(500)))
    result = verify_chain()
    assert result["valid"] is False
    assert "merkle root mismatch" in result["problems"]


def test_rewritten_block_breaks_the_link(app):
    fund(ALICE, credits(5))
    with get_session_scope() as session:
        block = session.get(ChainBlock, 1)
        block.timestamp = block.timestamp + 1
    result = verify_chain()
    assert result == {"valid": False, "height": 1, "problems": ["block hash mismatch"]}


def test_leaderboard_rebuild_task(app):
    assert rebuild_leaderboard_now(now=T0) == 0
