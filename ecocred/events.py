# ecocred/events.py
"""
Versioned ledger event schemas.

Every state change emits one of these models. They form a tagged union
discriminated on ``event_type`` so the off-chain indexer can validate a stored
payload without knowing in advance which contract produced it. Amounts are
arbitrary-precision integers and travel as decimal strings in JSON.
"""
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
)

from ecocred.constants import SCHEMA_VERSION


def _coerce_int(value):
    if isinstance(value, str):
        return int(value)
    return value


Amount = Annotated[
    int,
    BeforeValidator(_coerce_int),
    Field(ge=0),
    PlainSerializer(str, return_type=str, when_used="json"),
]


class LedgerEventBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    schema_version: int = SCHEMA_VERSION

    def payload(self) -> Dict[str, Any]:
        """JSON-safe dict, as persisted and served to indexers."""
        return self.model_dump(mode="json", by_alias=True)


# --- Credit token ---

class Transfer(LedgerEventBase):
    event_type: Literal["Transfer"] = "Transfer"
    from_: str = Field(alias="from")
    to: str
    amount: Amount


class Approval(LedgerEventBase):
    event_type: Literal["Approval"] = "Approval"
    owner: str
    spender: str
    amount: Amount


class MinterUpdated(LedgerEventBase):
    event_type: Literal["MinterUpdated"] = "MinterUpdated"
    new_minter: str
    enabled: bool = True


class OwnershipTransferred(LedgerEventBase):
    event_type: Literal["OwnershipTransferred"] = "OwnershipTransferred"
    previous_owner: str
    new_owner: str


# --- Badges ---

class BadgeTransfer(LedgerEventBase):
    event_type: Literal["BadgeTransfer"] = "BadgeTransfer"
    from_: str = Field(alias="from")
    to: str
    badge_id: int


class BadgeApproval(LedgerEventBase):
    event_type: Literal["BadgeApproval"] = "BadgeApproval"
    owner: str
    approved: str
    badge_id: int


class BadgeApprovalForAll(LedgerEventBase):
    event_type: Literal["BadgeApprovalForAll"] = "BadgeApprovalForAll"
    owner: str
    operator: str
    approved: bool


# --- Verification ---

class EcoActionLogged(LedgerEventBase):
    event_type: Literal["EcoActionLogged"] = "EcoActionLogged"
    action_id: int
    company: str
    title: str
    category: str


class ActionVerified(LedgerEventBase):
    event_type: Literal["ActionVerified"] = "ActionVerified"
    action_id: int
    verifier: str
    approved: bool
    actual_credits: int


class ActionFullyVerified(LedgerEventBase):
    event_type: Literal["ActionFullyVerified"] = "ActionFullyVerified"
    action_id: int
    company: str
    outcome: str
    awarded: Amount


# --- Marketplace ---

class ListingCreated(LedgerEventBase):
    event_type: Literal["ListingCreated"] = "ListingCreated"
    listing_id: int
    seller: str
    amount: Amount
    price_per_credit: Amount


class PurchaseExecuted(LedgerEventBase):
    event_type: Literal["PurchaseExecuted"] = "PurchaseExecuted"
    listing_id: int
    buyer: str
    amount: Amount
    total_price: Amount


class ListingCancelled(LedgerEventBase):
    event_type: Literal["ListingCancelled"] = "ListingCancelled"
    listing_id: int
    seller: str


class NativeWithdrawn(LedgerEventBase):
    event_type: Literal["NativeWithdrawn"] = "NativeWithdrawn"
    account: str
    amount: Amount


# --- Staking ---

class Staked(LedgerEventBase):
    event_type: Literal["Staked"] = "Staked"
    user: str
    stake_id: int
    amount: Amount
    lock_period: int


class Unstaked(LedgerEventBase):
    event_type: Literal["Unstaked"] = "Unstaked"
    user: str
    stake_id: int
    amount: Amount
    reward: Amount


# --- Retirement ---

class CreditsRetired(LedgerEventBase):
    event_type: Literal["CreditsRetired"] = "CreditsRetired"
    retirement_id: int
    retirer: str
    amount: Amount
    reason: str
    certificate_id: str


# --- Expiration ---

class CreditsExpired(LedgerEventBase):
    event_type: Literal["CreditsExpired"] = "CreditsExpired"
    holder: str
    amount: Amount
    batches: int


# --- Access control ---

class RoleGranted(LedgerEventBase):
    event_type: Literal["RoleGranted"] = "RoleGranted"
    account: str
    role: str
    granted_by: str


# --- Governance ---

class ProposalCreated(LedgerEventBase):
    event_type: Literal["ProposalCreated"] = "ProposalCreated"
    proposal_id: int
    proposer: str
    description: str
    target: str
    deadline: int


class VoteCast(LedgerEventBase):
    event_type: Literal["VoteCast"] = "VoteCast"
    proposal_id: int
    voter: str
    support: bool
    weight: Amount


class ProposalExecuted(LedgerEventBase):
    event_type: Literal["ProposalExecuted"] = "ProposalExecuted"
    proposal_id: int


# --- Read models and parameters ---

class LeaderboardUpdated(LedgerEventBase):
    event_type: Literal["LeaderboardUpdated"] = "LeaderboardUpdated"
    company: str
    rank: int
    credits: Amount


class ParameterUpdated(LedgerEventBase):
    event_type: Literal["ParameterUpdated"] = "ParameterUpdated"
    contract: str
    name: str
    value: str


LedgerEventModel = Annotated[
    Union[
        Transfer,
        Approval,
        MinterUpdated,
        OwnershipTransferred,
        BadgeTransfer,
        BadgeApproval,
        BadgeApprovalForAll,
        EcoActionLogged,
        ActionVerified,
        ActionFullyVerified,
        ListingCreated,
        PurchaseExecuted,
        ListingCancelled,
        NativeWithdrawn,
        Staked,
        Unstaked,
        CreditsRetired,
        CreditsExpired,
        RoleGranted,
        ProposalCreated,
        VoteCast,
        ProposalExecuted,
        LeaderboardUpdated,
        ParameterUpdated,
    ],
    Field(discriminator="event_type"),
]

_event_adapter = TypeAdapter(LedgerEventModel)

EVENT_TYPES = tuple(
    model.model_fields["event_type"].default
    for model in LedgerEventBase.__subclasses__()
)


def parse_event(data: Dict[str, Any]) -> LedgerEventBase:
    """Validates a stored payload back into its event model."""
    return _event_adapter.validate_python(data)
