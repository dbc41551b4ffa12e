# ecocred/systems/storage.py
"""Durable counters and governable settings shared by every contract."""
import logging
from typing import Any

from sqlalchemy.orm import Session

from ecocred.errors import NotBootstrappedError
from ecocred.models import LedgerCounter, SystemSetting

logger = logging.getLogger(__name__)

# --- Setting keys ---
OWNER = "owner"
VERIFICATION_THRESHOLD = "verification_threshold"
MARKETPLACE_FEE_BPS = "marketplace_fee_bps"
STAKING_REWARD_RATE_BPS = "staking_reward_rate_bps"
VOTING_PERIOD_SECONDS = "voting_period_seconds"
QUORUM_THRESHOLD_CREDITS = "quorum_threshold_credits"
PROPOSAL_THRESHOLD_CREDITS = "proposal_threshold_credits"
BADGE_BASE_URI = "badge_base_uri"
FEE_RECIPIENT = "fee_recipient"
CREDIT_EXPIRATION_SECONDS = "credit_expiration_seconds"

# --- Counter names ---
ACTION_IDS = "action_ids"
LISTING_IDS = "listing_ids"
STAKE_IDS = "stake_ids"
PROPOSAL_IDS = "proposal_ids"
BADGE_IDS = "badge_ids"
RETIREMENT_IDS = "retirement_ids"
CREDIT_BATCH_IDS = "credit_batch_ids"
TOTAL_SUPPLY = "credit_total_supply"
TOTAL_BURNED = "credit_total_burned"
TOTAL_RETIRED = "credit_total_retired"


def get_setting(session: Session, key: str, default: Any = None) -> Any:
    setting = session.get(SystemSetting, key)
    if setting is None:
        if default is None:
            raise NotBootstrappedError(f"Ledger setting '{key}' is missing; run `flask ledger bootstrap`.")
        return default
    return setting.value


def put_setting(session: Session, key: str, value: Any, description: str = None) -> None:
    setting = session.get(SystemSetting, key)
    if setting is None:
        setting = SystemSetting(key=key, value=value, description=description or "")
        session.add(setting)
    else:
        setting.value = value
        if description is not None:
            setting.description = description
    logger.debug(f"Setting '{key}' set to {value!r}")


def _counter(session: Session, name: str, lock: bool = False) -> LedgerCounter:
    query = session.query(LedgerCounter).filter_by(name=name)
    if lock:
        query = query.with_for_update()
    counter = query.first()
    if counter is None:
        counter = LedgerCounter(name=name, value=0)
        session.add(counter)
        session.flush()
    return counter


def read_counter(session: Session, name: str) -> int:
    counter = session.get(LedgerCounter, name)
    return counter.value if counter else 0


def next_id(session: Session, name: str) -> int:
    """Allocates the next id of a sequence. Ids start at 1 and are never reused."""
    counter = _counter(session, name, lock=True)
    counter.value = counter.value + 1
    return counter.value


def adjust_counter(session: Session, name: str, delta: int) -> int:
    counter = _counter(session, name, lock=True)
    value = counter.value + delta
    if value < 0:
        raise ValueError(f"Counter '{name}' would go negative")
    counter.value = value
    return value
