# ecocred/tasks.py
import logging
import time

from ecocred.extensions import celery
from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.expiration import expiration_registry
from ecocred.systems.leaderboard import leaderboard

logger = logging.getLogger(__name__)


def rebuild_leaderboard_now(now: int = None) -> int:
    """Recomputes every leaderboard entry from the company profiles."""
    with get_session_scope() as session:
        return leaderboard.rebuild(session, now if now is not None else int(time.time()))


def expire_due_credits_now(now: int = None) -> int:
    """Expires lapsed batches holder by holder; returns how many holders were processed."""
    now = now if now is not None else int(time.time())
    with get_session_scope() as session:
        holders = expiration_registry.holders_due(session, now)
    for holder in holders:
        # Each holder commits on its own.
        with ledger_transaction(now=now) as tx:
            expiration_registry.check_and_expire(tx, expiration_registry.address, holder)
    return len(holders)


@celery.task(name="ecocred.rebuild_leaderboard")
def rebuild_leaderboard():
    count = rebuild_leaderboard_now()
    logger.info(f"Celery task rebuild_leaderboard refreshed {count} entries.")
    return count


@celery.task(name="ecocred.expire_due_credits")
def expire_due_credits():
    count = expire_due_credits_now()
    logger.info(f"Celery task expire_due_credits processed {count} holders.")
    return count
