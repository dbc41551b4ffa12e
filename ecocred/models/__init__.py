# ecocred/models/__init__.py

# --- Import all of the model classes from their individual files ---
from .credit_balance import CreditBalance
from .credit_allowance import CreditAllowance
from .minter_grant import MinterGrant
from .ledger_counter import LedgerCounter
from .system_setting import SystemSetting
from .role_assignment import RoleAssignment
from .eco_action import EcoAction
from .verification_record import VerificationRecord
from .company_profile import CompanyProfile
from .badge import Badge, BadgeOperator
from .listing import Listing
from .native_balance import NativeBalance
from .stake import Stake
from .retirement import Retirement
from .credit_batch import CreditBatch
from .proposal import Proposal
from .proposal_vote import ProposalVote
from .leaderboard_entry import LeaderboardEntry
from .chain_block import ChainBlock
from .ledger_event import LedgerEvent

# This list tells Python which names to export when another file
# runs `from ecocred.models import *`
__all__ = [
    "CreditBalance",
    "CreditAllowance",
    "MinterGrant",
    "LedgerCounter",
    "SystemSetting",
    "RoleAssignment",
    "EcoAction",
    "VerificationRecord",
    "CompanyProfile",
    "Badge",
    "BadgeOperator",
    "Listing",
    "NativeBalance",
    "Stake",
    "Retirement",
    "CreditBatch",
    "Proposal",
    "ProposalVote",
    "LeaderboardEntry",
    "ChainBlock",
    "LedgerEvent",
]
