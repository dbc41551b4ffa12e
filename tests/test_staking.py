"""
Tests for time-locked staking.
"""
import pytest

from conftest import ALICE, BOB, DAY, OWNER, T0, credits, fund, read
from ecocred.constants import STAKING_ADDRESS
from ecocred.errors import (
    AlreadyClaimedError,
    InsufficientAllowanceError,
    InvalidArgumentError,
    NotFoundError,
    StillLockedError,
    UnauthorizedError,
)
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token
from ecocred.systems.staking import calculate_reward, staking_engine


def stake(amount, days, staker=ALICE, now=T0, approve=True):
    if approve:
        with ledger_transaction(now=now) as tx:
            credit_token.approve(tx, staker, STAKING_ADDRESS, amount)
    with ledger_transaction(now=now) as tx:
        return staking_engine.stake(tx, staker, amount, days)


def unstake(index, now, staker=ALICE):
    with ledger_transaction(now=now) as tx:
        return staking_engine.unstake(tx, staker, index)


def balance(address):
    return read(lambda s: credit_token.balance_of(s, address))


def test_reward_covers_lock_duration_only():
    assert calculate_reward(credits(30), 500, 30 * DAY) == credits(30) * 500 * 30 * DAY // (10_000 * 365 * DAY)
    assert calculate_reward(credits(100), 500, 365 * DAY) == credits(5)
    assert calculate_reward(1, 500, DAY) == 0


def test_stake_moves_principal_into_the_engine(app):
    fund(ALICE, credits(30))
    data = stake(credits(30), 30)
    assert data["stake_index"] == 0
    assert data["end_time"] == T0 + 30 * DAY
    assert data["reward_rate_bps"] == 500
    assert balance(ALICE) == 0
    assert balance(STAKING_ADDRESS) == credits(30)
    assert read(lambda s: staking_engine.total_staked(s, ALICE)) == credits(30)


def test_stake_requires_allowance(app):
    fund(ALICE, credits(30))
    with pytest.raises(InsufficientAllowanceError):
        stake(credits(30), 30, approve=False)


@pytest.mark.parametrize("days", [0, 3651, -1])
def test_lock_period_bounds(app, days):
    fund(ALICE, credits(1))
    with pytest.raises(InvalidArgumentError):
        stake(credits(1), days)


def test_unstake_before_lock_end_is_still_locked(app):
    fund(ALICE, credits(30))
    stake(credits(30), 30)
    with pytest.raises(StillLockedError):
        unstake(0, T0 + 30 * DAY - 1)
    assert balance(ALICE) == 0


def test_unstake_at_lock_end_pays_principal_and_reward(app):
    fund(ALICE, credits(30))
    stake(credits(30), 30)
    data = unstake(0, T0 + 30 * DAY)
    reward = calculate_reward(credits(30), 500, 30 * DAY)
    assert data["claimed"] is True
    assert data["reward_paid"] == str(reward)
    assert balance(ALICE) == credits(30) + reward
    assert balance(STAKING_ADDRESS) == 0
    assert read(credit_token.total_supply) == credits(30) + reward


def test_late_unstake_does_not_earn_extra(app):
    fund(ALICE, credits(30))
    stake(credits(30), 30)
    data = unstake(0, T0 + 400 * DAY)
    assert data["reward_paid"] == str(calculate_reward(credits(30), 500, 30 * DAY))


def test_second_unstake_is_already_claimed(app):
    fund(ALICE, credits(30))
    stake(credits(30), 30)
    unstake(0, T0 + 31 * DAY)
    with pytest.raises(AlreadyClaimedError):
        unstake(0, T0 + 32 * DAY)


def test_unknown_stake_index_is_not_found(app):
    with pytest.raises(NotFoundError):
        unstake(0, T0)


def test_stake_indexes_are_per_staker(app):
    fund(ALICE, credits(10))
    fund(BOB, credits(10))
    stake(credits(4), 1)
    stake(credits(6), 2)
    assert stake(credits(10), 3, staker=BOB)["stake_index"] == 0
    assert read(lambda s: staking_engine.get_stake_count(s, ALICE)) == 2
    assert [s["amount"] for s in read(lambda s: staking_engine.get_stakes(s, ALICE))] == [
        str(credits(4)), str(credits(6))
    ]


def test_rate_change_applies_to_new_stakes_only(app):
    fund(ALICE, credits(20))
    stake(credits(10), 365)
    with ledger_transaction(now=T0) as tx:
        staking_engine.set_reward_rate(tx, OWNER, 1000)
    second = stake(credits(10), 365)
    assert second["reward_rate_bps"] == 1000
    # 5% of 10 credits for a full year
    assert unstake(0, T0 + 365 * DAY)["reward_paid"] == str(credits(10) // 20)


def test_reward_rate_is_owner_only(app):
    with pytest.raises(UnauthorizedError):
        with ledger_transaction(now=T0) as tx:
            staking_engine.set_reward_rate(tx, ALICE, 1)
