# ecocred/systems/status.py
import logging
from typing import Any, Dict

from ecocred.constants import CONTRACT_ADDRESSES
from ecocred.models.db_utils import get_session_scope
from ecocred.systems import storage
from ecocred.systems.bootstrap import is_bootstrapped
from ecocred.systems.chain import last_block, verify_chain
from ecocred.systems.credit_token import credit_token
from ecocred.systems.verification import verification_ledger

logger = logging.getLogger(__name__)


def get_ledger_status() -> Dict[str, Any]:
    """Aggregate view of the ledger's health for operators and indexers."""
    with get_session_scope() as session:
        bootstrapped = is_bootstrapped(session)
        summary = {
            "bootstrapped": bootstrapped,
            "contracts": dict(CONTRACT_ADDRESSES),
            "reputation_strategy": verification_ledger.scoring.name,
        }
        if bootstrapped:
            summary.update({
                "owner": credit_token.owner(session),
                "minters": credit_token.minters(session),
                "total_supply": str(credit_token.total_supply(session)),
                "total_burned": str(credit_token.total_burned(session)),
                "verification_threshold": storage.get_setting(session, storage.VERIFICATION_THRESHOLD),
                "action_count": verification_ledger.action_count(session),
            })

    chain = verify_chain()
    summary["chain"] = {"head": last_block(), **chain}
    summary["systemHealthy"] = bootstrapped and chain["valid"]
    if not summary["systemHealthy"]:
        logger.warning(f"Ledger status unhealthy: bootstrapped={bootstrapped}, chain_valid={chain['valid']}")
    return summary
