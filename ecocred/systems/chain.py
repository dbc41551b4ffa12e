# ecocred/systems/chain.py
"""
The single, ordered, hash-chained ledger log.

Every top-level contract call runs inside ``ledger_transaction()``. The
transaction carries the caller-supplied block timestamp and collects the
events emitted along the call chain. On success the events are sealed into
a new ChainBlock in the same database transaction as the state they
describe; on any exception nothing is written at all.
"""
import hashlib
import json
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ecocred.events import LedgerEventBase
from ecocred.models import ChainBlock, LedgerEvent
from ecocred.models.db_utils import get_session_scope

logger = logging.getLogger(__name__)

GENESIS_PREVIOUS_HASH = "0" * 64


def sha256(data: bytes) -> str:
    """Computes a SHA256 hash."""
    return hashlib.sha256(data).hexdigest()


def merkle_root_hash(payloads: List[Dict[str, Any]]) -> str:
    """Computes a Merkle root hash for a list of event payload dictionaries."""
    if not payloads:
        return sha256(b'')
    hashes = [sha256(json.dumps(p, sort_keys=True).encode()) for p in payloads]
    while len(hashes) > 1:
        if len(hashes) % 2 != 0:
            hashes.append(hashes[-1])
        hashes = [sha256((hashes[i] + hashes[i + 1]).encode()) for i in range(0, len(hashes), 2)]
    return hashes[0]


def calculate_block_hash(height: int, timestamp: int, previous_hash: str, merkle_root: str, tx_id: Optional[str]) -> str:
    header_str = f"{height}:{timestamp}:{previous_hash}:{merkle_root}:{tx_id or ''}"
    return sha256(header_str.encode())


class LedgerTransaction:
    """State shared by every contract call inside one atomic ledger transaction."""

    def __init__(self, session: Session, now: int, tx_id: str = None):
        self.session = session
        self.now = int(now)
        self.tx_id = tx_id or uuid.uuid4().hex
        self.events: List[LedgerEventBase] = []

    def emit(self, event: LedgerEventBase) -> None:
        self.events.append(event)
        logger.debug(f"Event {event.event_type} queued in tx {self.tx_id}")


def create_genesis_block_if_needed(session: Session, now: int) -> ChainBlock:
    """Ensures a genesis block exists in the database."""
    genesis = session.get(ChainBlock, 0)
    if genesis is not None:
        return genesis
    logger.info("No genesis block found. Creating one now.")
    merkle_root = merkle_root_hash([])
    genesis = ChainBlock(
        height=0,
        previous_hash=GENESIS_PREVIOUS_HASH,
        merkle_root=merkle_root,
        block_hash=calculate_block_hash(0, now, GENESIS_PREVIOUS_HASH, merkle_root, None),
        tx_id=None,
        timestamp=now,
        event_count=0,
    )
    session.add(genesis)
    session.flush()
    return genesis


def _seal(tx: LedgerTransaction) -> Optional[ChainBlock]:
    """Appends a block holding the transaction's events. No events, no block."""
    if not tx.events:
        return None

    session = tx.session
    last = (
        session.query(ChainBlock)
        .order_by(ChainBlock.height.desc())
        .with_for_update()
        .first()
    )
    if last is None:
        last = create_genesis_block_if_needed(session, tx.now)

    payloads = [event.payload() for event in tx.events]
    height = last.height + 1
    merkle_root = merkle_root_hash(payloads)
    block = ChainBlock(
        height=height,
        previous_hash=last.block_hash,
        merkle_root=merkle_root,
        block_hash=calculate_block_hash(height, tx.now, last.block_hash, merkle_root, tx.tx_id),
        tx_id=tx.tx_id,
        timestamp=tx.now,
        event_count=len(payloads),
    )
    session.add(block)
    for log_index, (event, payload) in enumerate(zip(tx.events, payloads)):
        session.add(LedgerEvent(
            block_height=height,
            tx_id=tx.tx_id,
            log_index=log_index,
            event_type=event.event_type,
            schema_version=event.schema_version,
            payload=payload,
            timestamp=tx.now,
        ))
    session.flush()
    logger.info(f"🧱 New block created at height {height} with {len(payloads)} events.")
    return block


@contextmanager
def ledger_transaction(now: Optional[int] = None):
    """
    Run contract calls as one all-or-nothing ledger transaction.

    Usage:
        with ledger_transaction(now=block_time) as tx:
            credit_token.transfer(tx, caller, to, amount)
    """
    with get_session_scope() as session:
        tx = LedgerTransaction(session, now if now is not None else int(time.time()))
        yield tx
        _seal(tx)


def last_block() -> Optional[Dict[str, Any]]:
    """Get the most recent block from the database."""
    with get_session_scope() as session:
        block = session.query(ChainBlock).order_by(ChainBlock.height.desc()).first()
        return block.to_dict() if block else None


def get_blocks(after: int = -1, limit: int = 50) -> List[Dict[str, Any]]:
    with get_session_scope() as session:
        blocks = (
            session.query(ChainBlock)
            .filter(ChainBlock.height > after)
            .order_by(ChainBlock.height.asc())
            .limit(limit)
            .all()
        )
        return [b.to_dict() for b in blocks]


def get_events(after: int = 0, limit: int = 50, event_type: str = None) -> List[Dict[str, Any]]:
    """Finalized events in log order, for indexers paging with ``after``."""
    with get_session_scope() as session:
        query = session.query(LedgerEvent).filter(LedgerEvent.id > after)
        if event_type:
            query = query.filter(LedgerEvent.event_type == event_type)
        events = query.order_by(LedgerEvent.id.asc()).limit(limit).all()
        return [e.to_dict() for e in events]


def verify_chain() -> Dict[str, Any]:
    """Re-derives every block hash and merkle root and checks the links."""
    with get_session_scope() as session:
        blocks = session.query(ChainBlock).order_by(ChainBlock.height.asc()).all()
        previous_hash = GENESIS_PREVIOUS_HASH
        for expected_height, block in enumerate(blocks):
            payloads = [e.payload for e in block.events]
            problems = []
            if block.height != expected_height:
                problems.append("height gap")
            if block.previous_hash != previous_hash:
                problems.append("broken link")
            if block.merkle_root != merkle_root_hash(payloads):
                problems.append("merkle root mismatch")
            recomputed = calculate_block_hash(
                block.height, block.timestamp, block.previous_hash, block.merkle_root, block.tx_id
            )
            if block.block_hash != recomputed:
                problems.append("block hash mismatch")
            if problems:
                logger.error(f"Chain verification failed at height {block.height}: {', '.join(problems)}")
                return {"valid": False, "height": block.height, "problems": problems}
            previous_hash = block.block_hash
        return {"valid": True, "height": len(blocks) - 1, "problems": []}
