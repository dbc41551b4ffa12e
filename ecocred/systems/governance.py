# ecocred/systems/governance.py
"""
Token-weighted governance.

A proposal stores one call against a governable contract function. Voting
power is the voter's credit balance at the moment of their vote. After the
deadline anyone may execute a proposal that met quorum and has more power
for than against; the stored call then runs with the governance contract as
caller, so it only succeeds for owner-gated functions once platform ownership
has been handed to governance.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.orm import Session

from ecocred.constants import GOVERNANCE_ADDRESS, ONE_CREDIT, ProposalState
from ecocred.errors import (
    AlreadyExecutedError,
    AlreadyVotedError,
    ExecutionFailedError,
    InsufficientPowerError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    ProposalRejectedError,
    QuorumNotMetError,
    VotingClosedError,
    VotingStillOpenError,
)
from ecocred.events import ProposalCreated, ProposalExecuted, VoteCast
from ecocred.models import Proposal, ProposalVote
from ecocred.systems import storage
from ecocred.systems.access_control import access_control
from ecocred.systems.badge_registry import badge_registry
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token
from ecocred.systems.expiration import expiration_registry
from ecocred.systems.marketplace import marketplace
from ecocred.systems.staking import staking_engine
from ecocred.systems.verification import verification_ledger
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


# --- Pydantic schemas for stored calls ---

class ProposalCall(BaseModel):
    model_config = ConfigDict(extra="forbid")

    function: str = Field(..., min_length=1)
    args: Dict[str, Any] = Field(default_factory=dict)


class _Args(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class MinterArgs(_Args):
    minter: str


class NewOwnerArgs(_Args):
    new_owner: str


class ThresholdArgs(_Args):
    threshold: int


class FeeArgs(_Args):
    fee_bps: int


class RewardRateArgs(_Args):
    rate_bps: int


class GrantRoleArgs(_Args):
    account: str
    role: str


class AccountArgs(_Args):
    account: str


class BaseUriArgs(_Args):
    uri: str


class FeeRecipientArgs(_Args):
    recipient: str


class ExpirationPeriodArgs(_Args):
    seconds: int


Dispatch = Callable[[LedgerTransaction, str, Any], None]

GOVERNABLE_CALLS: Dict[Tuple[str, str], Tuple[Type[_Args], Dispatch]] = {
    ("credit_token", "set_minter"): (
        MinterArgs, lambda tx, caller, a: credit_token.set_minter(tx, caller, a.minter)),
    ("credit_token", "add_minter"): (
        MinterArgs, lambda tx, caller, a: credit_token.add_minter(tx, caller, a.minter)),
    ("credit_token", "remove_minter"): (
        MinterArgs, lambda tx, caller, a: credit_token.remove_minter(tx, caller, a.minter)),
    ("credit_token", "transfer_ownership"): (
        NewOwnerArgs, lambda tx, caller, a: credit_token.transfer_ownership(tx, caller, a.new_owner)),
    ("verification", "set_verification_threshold"): (
        ThresholdArgs, lambda tx, caller, a: verification_ledger.set_verification_threshold(tx, caller, a.threshold)),
    ("marketplace", "set_platform_fee"): (
        FeeArgs, lambda tx, caller, a: marketplace.set_platform_fee(tx, caller, a.fee_bps)),
    ("marketplace", "set_fee_recipient"): (
        FeeRecipientArgs, lambda tx, caller, a: marketplace.set_fee_recipient(tx, caller, a.recipient)),
    ("staking", "set_reward_rate"): (
        RewardRateArgs, lambda tx, caller, a: staking_engine.set_reward_rate(tx, caller, a.rate_bps)),
    ("access_control", "grant_role"): (
        GrantRoleArgs, lambda tx, caller, a: access_control.grant_role(tx, caller, a.account, a.role)),
    ("access_control", "revoke_role"): (
        AccountArgs, lambda tx, caller, a: access_control.revoke_role(tx, caller, a.account)),
    ("badge", "set_base_uri"): (
        BaseUriArgs, lambda tx, caller, a: badge_registry.set_base_uri(tx, caller, a.uri)),
    ("expiration", "set_expiration_period"): (
        ExpirationPeriodArgs, lambda tx, caller, a: expiration_registry.set_expiration_period(tx, caller, a.seconds)),
}

GOVERNABLE_TARGETS = frozenset(target for target, _ in GOVERNABLE_CALLS)


def _resolve_call(target: str, data: Any) -> Tuple[_Args, Dispatch]:
    if target not in GOVERNABLE_TARGETS:
        raise InvalidArgumentError(f"'{target}' is not a governable contract")
    try:
        call = ProposalCall.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(f"Malformed proposal call: {e.errors()}")
    entry = GOVERNABLE_CALLS.get((target, call.function))
    if entry is None:
        raise InvalidArgumentError(f"'{target}.{call.function}' is not a governable function")
    schema, dispatch = entry
    try:
        args = schema.model_validate(call.args)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid arguments for {target}.{call.function}: {e.errors()}")
    return args, dispatch


class Governance:
    address = GOVERNANCE_ADDRESS

    def _get(self, session: Session, proposal_id: int, lock: bool = False) -> Proposal:
        query = session.query(Proposal).filter_by(id=proposal_id)
        if lock:
            query = query.with_for_update()
        proposal = query.first()
        if proposal is None:
            raise NotFoundError(f"Proposal {proposal_id} does not exist")
        return proposal

    def create_proposal(self, tx: LedgerTransaction, caller: str, description: str, target: str, data: Dict[str, Any]) -> int:
        threshold = storage.get_setting(tx.session, storage.PROPOSAL_THRESHOLD_CREDITS) * ONE_CREDIT
        balance = credit_token.balance_of(tx.session, caller)
        if balance < threshold:
            raise InsufficientPowerError(f"{caller} holds {balance}; proposing requires {threshold}")
        if not isinstance(description, str) or not description.strip():
            raise InvalidArgumentError("description must not be empty")
        _resolve_call(target, data)

        proposal_id = storage.next_id(tx.session, storage.PROPOSAL_IDS)
        deadline = tx.now + storage.get_setting(tx.session, storage.VOTING_PERIOD_SECONDS)
        tx.session.add(Proposal(
            id=proposal_id,
            proposer=caller,
            description=description.strip(),
            target=target,
            call_data=ProposalCall.model_validate(data).model_dump(),
            votes_for=0,
            votes_against=0,
            deadline=deadline,
            executed=False,
            created_at=tx.now,
        ))
        tx.emit(ProposalCreated(
            proposal_id=proposal_id, proposer=caller, description=description.strip(), target=target, deadline=deadline
        ))
        logger.info(f"🗳️ Proposal {proposal_id} created by {caller} targeting {target}")
        return proposal_id

    def vote(self, tx: LedgerTransaction, caller: str, proposal_id: int, support: bool) -> Dict[str, Any]:
        proposal = self._get(tx.session, proposal_id, lock=True)
        if tx.session.get(ProposalVote, (proposal_id, caller)) is not None:
            raise AlreadyVotedError(f"{caller} already voted on proposal {proposal_id}")
        if tx.now >= proposal.deadline:
            raise VotingClosedError(f"Voting on proposal {proposal_id} closed at {proposal.deadline}")
        power = credit_token.balance_of(tx.session, caller)
        if power == 0:
            raise InsufficientPowerError(f"{caller} has no voting power")

        tx.session.add(ProposalVote(
            proposal_id=proposal_id, voter=caller, support=bool(support), power=power, cast_at=tx.now
        ))
        if support:
            proposal.votes_for = proposal.votes_for + power
        else:
            proposal.votes_against = proposal.votes_against + power
        tx.emit(VoteCast(proposal_id=proposal_id, voter=caller, support=bool(support), weight=power))
        logger.info(f"🗳️ {caller} voted {'for' if support else 'against'} proposal {proposal_id} with {power}")
        return proposal.to_dict()

    def execute_proposal(self, tx: LedgerTransaction, caller: str, proposal_id: int) -> Dict[str, Any]:
        proposal = self._get(tx.session, proposal_id, lock=True)
        if tx.now < proposal.deadline:
            raise VotingStillOpenError(f"Voting on proposal {proposal_id} is open until {proposal.deadline}")
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal {proposal_id} was already executed")
        quorum = storage.get_setting(tx.session, storage.QUORUM_THRESHOLD_CREDITS) * ONE_CREDIT
        if proposal.votes_for + proposal.votes_against < quorum:
            raise QuorumNotMetError(f"Proposal {proposal_id} did not reach quorum {quorum}")
        if proposal.votes_for <= proposal.votes_against:
            raise ProposalRejectedError(f"Proposal {proposal_id} was rejected")

        try:
            args, dispatch = _resolve_call(proposal.target, proposal.call_data)
            dispatch(tx, self.address, args)
        except LedgerError as e:
            raise ExecutionFailedError(f"Proposal {proposal_id} call failed: {e.kind}: {e}") from e

        proposal.executed = True
        proposal.executed_at = tx.now
        tx.emit(ProposalExecuted(proposal_id=proposal_id))
        logger.info(f"⚖️ Proposal {proposal_id} executed by {caller}")
        return proposal.to_dict()

    # ------------------------- Reads -------------------------
    def state_of(self, proposal: Proposal, now: int) -> ProposalState:
        if proposal.executed:
            return ProposalState.EXECUTED
        if now < proposal.deadline:
            return ProposalState.OPEN
        return ProposalState.EXPIRED

    def get_proposal(self, session: Session, proposal_id: int, now: Optional[int] = None) -> Dict[str, Any]:
        proposal = self._get(session, proposal_id)
        data = proposal.to_dict()
        data["state"] = self.state_of(proposal, now if now is not None else int(time.time())).value
        return data

    def has_voted(self, session: Session, proposal_id: int, voter: str) -> bool:
        return session.get(ProposalVote, (proposal_id, normalize_address(voter, "voter"))) is not None

    def get_vote(self, session: Session, proposal_id: int, voter: str) -> Optional[Dict[str, Any]]:
        vote = session.get(ProposalVote, (proposal_id, normalize_address(voter, "voter")))
        return vote.to_dict() if vote else None

    def proposal_count(self, session: Session) -> int:
        return storage.read_counter(session, storage.PROPOSAL_IDS)


# Singleton instance
governance = Governance()
