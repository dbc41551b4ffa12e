# ecocred/constants.py
import enum

from ecocred.utils.addresses import NULL_ADDRESS, contract_address

# --- Fixed-point credit unit ---
CREDIT_DECIMALS = 18
ONE_CREDIT = 10 ** CREDIT_DECIMALS

CREDIT_TOKEN_NAME = "Carbon Credit"
CREDIT_TOKEN_SYMBOL = "CCT"
BADGE_NAME = "EcoBadge"
BADGE_SYMBOL = "ECOB"

# Minted amounts at or above this earn the company a badge.
BADGE_AWARD_THRESHOLD = 100 * ONE_CREDIT

BPS_DENOMINATOR = 10_000
MAX_PLATFORM_FEE_BPS = 1_000
SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY
MAX_LOCK_PERIOD_DAYS = 3650

SCHEMA_VERSION = 1

# --- Contract addresses (deterministic, derived from the contract name) ---
CREDIT_TOKEN_ADDRESS = contract_address("credit_token")
BADGE_REGISTRY_ADDRESS = contract_address("badge")
ACCESS_CONTROL_ADDRESS = contract_address("access_control")
VERIFICATION_ADDRESS = contract_address("verification")
MARKETPLACE_ADDRESS = contract_address("marketplace")
STAKING_ADDRESS = contract_address("staking")
RETIREMENT_ADDRESS = contract_address("retirement")
GOVERNANCE_ADDRESS = contract_address("governance")
EXPIRATION_ADDRESS = contract_address("expiration")

CONTRACT_ADDRESSES = {
    "credit_token": CREDIT_TOKEN_ADDRESS,
    "badge": BADGE_REGISTRY_ADDRESS,
    "access_control": ACCESS_CONTROL_ADDRESS,
    "verification": VERIFICATION_ADDRESS,
    "marketplace": MARKETPLACE_ADDRESS,
    "staking": STAKING_ADDRESS,
    "retirement": RETIREMENT_ADDRESS,
    "governance": GOVERNANCE_ADDRESS,
    "expiration": EXPIRATION_ADDRESS,
}


class Role(enum.IntEnum):
    NONE = 0
    ADMIN = 1
    VERIFIER = 2
    MODERATOR = 3


class ActionStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    VERIFIED = "VERIFIED"


class ActionOutcome(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ListingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    CANCELLED = "CANCELLED"


class ProposalState(str, enum.Enum):
    OPEN = "OPEN"
    EXECUTED = "EXECUTED"
    EXPIRED = "EXPIRED"


__all__ = [
    "NULL_ADDRESS",
    "CREDIT_DECIMALS",
    "ONE_CREDIT",
    "BADGE_AWARD_THRESHOLD",
    "BPS_DENOMINATOR",
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "Role",
    "ActionStatus",
    "ActionOutcome",
    "ListingStatus",
    "ProposalState",
]
