# ecocred/systems/staking.py
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ecocred.constants import (
    BPS_DENOMINATOR,
    MAX_LOCK_PERIOD_DAYS,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    STAKING_ADDRESS,
)
from ecocred.errors import (
    AlreadyClaimedError,
    InvalidArgumentError,
    NotFoundError,
    StillLockedError,
)
from ecocred.events import ParameterUpdated, Staked, Unstaked
from ecocred.models import Stake
from ecocred.systems import storage
from ecocred.systems.access_control import require_owner
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token, require_positive_amount
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


def calculate_reward(amount: int, rate_bps: int, lock_seconds: int) -> int:
    """Simple interest over the lock duration only, floor-divided."""
    return amount * rate_bps * lock_seconds // (BPS_DENOMINATOR * SECONDS_PER_YEAR)


class StakingEngine:
    """Time-locked staking; principal is held in the engine's own balance."""
    address = STAKING_ADDRESS

    def stake(self, tx: LedgerTransaction, caller: str, amount: int, lock_period_days: int) -> Dict[str, Any]:
        require_positive_amount(amount)
        if (
            isinstance(lock_period_days, bool)
            or not isinstance(lock_period_days, int)
            or not 1 <= lock_period_days <= MAX_LOCK_PERIOD_DAYS
        ):
            raise InvalidArgumentError(f"lock_period_days must be between 1 and {MAX_LOCK_PERIOD_DAYS}")

        credit_token.transfer_from(tx, self.address, caller, self.address, amount)

        stake_id = storage.next_id(tx.session, storage.STAKE_IDS)
        stake_index = tx.session.query(Stake).filter_by(staker=caller).count()
        stake = Stake(
            id=stake_id,
            staker=caller,
            stake_index=stake_index,
            amount=amount,
            start_time=tx.now,
            end_time=tx.now + lock_period_days * SECONDS_PER_DAY,
            lock_period_days=lock_period_days,
            reward_rate_bps=storage.get_setting(tx.session, storage.STAKING_REWARD_RATE_BPS),
            claimed=False,
            reward_paid=0,
        )
        tx.session.add(stake)
        tx.emit(Staked(user=caller, stake_id=stake_id, amount=amount, lock_period=lock_period_days))
        logger.info(f"🔒 {caller} staked {amount} for {lock_period_days} days (stake {stake_id}, index {stake_index})")
        return stake.to_dict()

    def unstake(self, tx: LedgerTransaction, caller: str, stake_index: int) -> Dict[str, Any]:
        """Returns the principal and mints the reward once the lock has expired."""
        stake = (
            tx.session.query(Stake)
            .filter_by(staker=caller, stake_index=stake_index)
            .with_for_update()
            .first()
        )
        if stake is None:
            raise NotFoundError(f"{caller} has no stake at index {stake_index}")
        if tx.now < stake.end_time:
            raise StillLockedError(f"Stake {stake.id} unlocks at {stake.end_time}")
        if stake.claimed:
            raise AlreadyClaimedError(f"Stake {stake.id} was already claimed")

        reward = calculate_reward(stake.amount, stake.reward_rate_bps, stake.end_time - stake.start_time)
        credit_token.transfer(tx, self.address, caller, stake.amount)
        if reward > 0:
            credit_token.mint(tx, self.address, caller, reward)
        stake.claimed = True
        stake.reward_paid = reward

        tx.emit(Unstaked(user=caller, stake_id=stake.id, amount=stake.amount, reward=reward))
        logger.info(f"🔓 {caller} unstaked {stake.amount} with reward {reward} (stake {stake.id})")
        return stake.to_dict()

    def set_reward_rate(self, tx: LedgerTransaction, caller: str, rate_bps: int) -> None:
        """Applies to new stakes only; existing stakes keep their rate."""
        require_owner(tx, caller)
        if isinstance(rate_bps, bool) or not isinstance(rate_bps, int) or rate_bps < 0:
            raise InvalidArgumentError("rate_bps must be a non-negative integer")
        storage.put_setting(tx.session, storage.STAKING_REWARD_RATE_BPS, rate_bps)
        tx.emit(ParameterUpdated(contract="staking", name="reward_rate_bps", value=str(rate_bps)))

    # ------------------------- Reads -------------------------
    def get_stake(self, session: Session, staker: str, stake_index: int) -> Dict[str, Any]:
        staker = normalize_address(staker, "staker")
        stake = session.query(Stake).filter_by(staker=staker, stake_index=stake_index).first()
        if stake is None:
            raise NotFoundError(f"{staker} has no stake at index {stake_index}")
        return stake.to_dict()

    def get_stakes(self, session: Session, staker: str) -> List[Dict[str, Any]]:
        staker = normalize_address(staker, "staker")
        stakes = session.query(Stake).filter_by(staker=staker).order_by(Stake.stake_index.asc()).all()
        return [s.to_dict() for s in stakes]

    def get_stake_count(self, session: Session, staker: str) -> int:
        return session.query(Stake).filter_by(staker=normalize_address(staker, "staker")).count()

    def total_staked(self, session: Session, staker: str = None) -> int:
        """Principal currently locked, overall or for one staker."""
        query = session.query(Stake).filter_by(claimed=False)
        if staker:
            query = query.filter_by(staker=normalize_address(staker, "staker"))
        return sum(s.amount for s in query.all())

    def reward_rate_bps(self, session: Session) -> int:
        return storage.get_setting(session, storage.STAKING_REWARD_RATE_BPS)


# Singleton instance
staking_engine = StakingEngine()
