# ecocred/routes/staking_routes.py
import http
import logging
from typing import Tuple

from flask import Blueprint, Response, g, jsonify
from pydantic import BaseModel, Field

from ecocred.constants import MAX_LOCK_PERIOD_DAYS
from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.staking import staking_engine
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import Uint, validate_with

logger = logging.getLogger(__name__)
staking_bp = Blueprint('staking', __name__, url_prefix='/api/v1/staking')


class StakeSchema(BaseModel):
    amount: Uint
    lock_period_days: int = Field(..., ge=1, le=MAX_LOCK_PERIOD_DAYS)


@staking_bp.route('/stakes', methods=['POST'])
@require_api_key
@require_account
@validate_with(StakeSchema)
def stake() -> Tuple[Response, int]:
    """Locks the caller's credits; the staking contract needs an allowance first."""
    data: StakeSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        result = staking_engine.stake(tx, g.account, data.amount, data.lock_period_days)
    return jsonify({"status": "success", "stake": result, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@staking_bp.route('/stakes/<address>', methods=['GET'])
def list_stakes(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        stakes = staking_engine.get_stakes(session, address)
        total = staking_engine.total_staked(session, address)
    return jsonify({"status": "success", "stakes": stakes, "total_staked": str(total)}), http.HTTPStatus.OK


@staking_bp.route('/stakes/<int:stake_index>/unstake', methods=['POST'])
@require_api_key
@require_account
def unstake(stake_index: int) -> Tuple[Response, int]:
    with ledger_transaction(g.block_time) as tx:
        result = staking_engine.unstake(tx, g.account, stake_index)
    return jsonify({"status": "success", "stake": result, "tx_id": tx.tx_id}), http.HTTPStatus.OK
