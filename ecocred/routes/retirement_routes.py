# ecocred/routes/retirement_routes.py
import http
import logging
from typing import Tuple

from flask import Blueprint, Response, g, jsonify
from pydantic import BaseModel, Field

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.retirement import retirement_registry
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import Uint, validate_with

logger = logging.getLogger(__name__)
retirement_bp = Blueprint('retirements', __name__, url_prefix='/api/v1')


class RetireSchema(BaseModel):
    amount: Uint
    reason: str = ""
    certificate_id: str = Field(..., min_length=1, max_length=255)


@retirement_bp.route('/retirements', methods=['POST'])
@require_api_key
@require_account
@validate_with(RetireSchema)
def retire_credits() -> Tuple[Response, int]:
    data: RetireSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        retirement_id = retirement_registry.retire_credits(
            tx, g.account, data.amount, data.reason, data.certificate_id
        )
        retirement = retirement_registry.get_retirement(tx.session, retirement_id)
    return jsonify({"status": "success", "retirement": retirement, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@retirement_bp.route('/retirements/<int:retirement_id>', methods=['GET'])
def get_retirement(retirement_id: int) -> Tuple[Response, int]:
    with get_session_scope() as session:
        retirement = retirement_registry.get_retirement(session, retirement_id)
    return jsonify({"status": "success", "retirement": retirement}), http.HTTPStatus.OK


@retirement_bp.route('/retirements/by/<address>', methods=['GET'])
def list_retirements(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        retirements = retirement_registry.retirements_of(session, address)
        total = retirement_registry.retired_by(session, address)
    return jsonify({"status": "success", "retirements": retirements, "total_retired": str(total)}), http.HTTPStatus.OK
