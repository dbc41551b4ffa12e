# ecocred/systems/bootstrap.py
"""Seeds a fresh ledger: genesis block, governable settings, minters, first admin."""
import logging
from typing import Any, Dict, Mapping, Optional

from flask import current_app

from ecocred.constants import STAKING_ADDRESS, VERIFICATION_ADDRESS
from ecocred.events import MinterUpdated
from ecocred.models import MinterGrant, SystemSetting
from ecocred.systems import storage
from ecocred.systems.access_control import access_control
from ecocred.systems.chain import create_genesis_block_if_needed, ledger_transaction
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)

# setting key -> (config key, description)
SEEDED_SETTINGS = {
    storage.VERIFICATION_THRESHOLD: ("VERIFICATION_THRESHOLD", "Distinct verifier decisions needed to finalize an action"),
    storage.MARKETPLACE_FEE_BPS: ("MARKETPLACE_FEE_BPS", "Platform fee on marketplace purchases, in basis points"),
    storage.STAKING_REWARD_RATE_BPS: ("STAKING_REWARD_RATE_BPS", "Annual staking reward rate for new stakes, in basis points"),
    storage.VOTING_PERIOD_SECONDS: ("VOTING_PERIOD_SECONDS", "Governance voting window"),
    storage.QUORUM_THRESHOLD_CREDITS: ("QUORUM_THRESHOLD_CREDITS", "Whole credits of votes needed for quorum"),
    storage.PROPOSAL_THRESHOLD_CREDITS: ("PROPOSAL_THRESHOLD_CREDITS", "Whole credits needed to create a proposal"),
    storage.BADGE_BASE_URI: ("BADGE_BASE_URI", "Prefix of badge metadata URIs"),
    storage.CREDIT_EXPIRATION_SECONDS: ("CREDIT_EXPIRATION_SECONDS", "Lifetime of newly awarded credit batches"),
}

INITIAL_MINTERS = (VERIFICATION_ADDRESS, STAKING_ADDRESS)


def is_bootstrapped(session) -> bool:
    return session.get(SystemSetting, storage.OWNER) is not None


def bootstrap_ledger(config: Optional[Mapping[str, Any]] = None, now: Optional[int] = None) -> Dict[str, Any]:
    """
    Initialises the ledger once. Running it again is a no-op, so parameters
    changed later by the owner or governance are never overwritten.
    """
    config = config if config is not None else current_app.config
    owner = normalize_address(config["PLATFORM_OWNER_ADDRESS"], "PLATFORM_OWNER_ADDRESS")

    with ledger_transaction(now=now) as tx:
        create_genesis_block_if_needed(tx.session, tx.now)
        if is_bootstrapped(tx.session):
            logger.info("Ledger already bootstrapped; nothing to do.")
            return {"bootstrapped": False, "owner": storage.get_setting(tx.session, storage.OWNER)}

        storage.put_setting(tx.session, storage.OWNER, owner, "Platform owner address")
        for key, (config_key, description) in SEEDED_SETTINGS.items():
            storage.put_setting(tx.session, key, config[config_key], description)
        fee_recipient = config.get("PLATFORM_FEE_RECIPIENT") or owner
        storage.put_setting(
            tx.session,
            storage.FEE_RECIPIENT,
            normalize_address(fee_recipient, "PLATFORM_FEE_RECIPIENT"),
            "Account credited with marketplace platform fees",
        )

        for minter in INITIAL_MINTERS:
            tx.session.add(MinterGrant(address=minter, granted_at=tx.now))
            tx.emit(MinterUpdated(new_minter=minter, enabled=True))

        access_control.bootstrap_admin(tx, owner)

    logger.info(f"🚀 Ledger bootstrapped with owner {owner}.")
    return {"bootstrapped": True, "owner": owner}
