# ecocred/routes/action_routes.py
import http
import logging
from typing import List, Tuple

from flask import Blueprint, Response, g, jsonify
from pydantic import BaseModel, Field

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.verification import verification_ledger
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import validate_with

logger = logging.getLogger(__name__)
actions_bp = Blueprint('actions', __name__, url_prefix='/api/v1')


# --- Pydantic Input Models ---
class LogActionSchema(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    estimated_credits: int = Field(..., gt=0)
    location: str = ""
    category: str = ""


class BatchLogActionsSchema(BaseModel):
    actions: List[LogActionSchema] = Field(..., min_length=1, max_length=50)


class VerifyActionSchema(BaseModel):
    approved: bool
    actual_credits: int = Field(0, ge=0)
    comments: str = ""


# --- API Routes ---

@actions_bp.route('/actions', methods=['POST'])
@require_api_key
@require_account
@validate_with(LogActionSchema)
def log_action() -> Tuple[Response, int]:
    """Logs an eco action on behalf of the acting company."""
    data: LogActionSchema = g.validated_data
    logger.info(f"📥 API: Eco action submission from {g.account}")
    with ledger_transaction(g.block_time) as tx:
        action_id = verification_ledger.log_eco_action(
            tx,
            g.account,
            title=data.title,
            description=data.description,
            estimated_credits=data.estimated_credits,
            location=data.location,
            category=data.category,
        )
        action = verification_ledger.get_action(tx.session, action_id)
    return jsonify({"status": "success", "action": action, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@actions_bp.route('/actions/batch', methods=['POST'])
@require_api_key
@require_account
@validate_with(BatchLogActionsSchema)
def batch_log_actions() -> Tuple[Response, int]:
    """Logs several actions at once; either all are recorded or none."""
    data: BatchLogActionsSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        action_ids = verification_ledger.batch_log_actions(
            tx, g.account, [entry.model_dump() for entry in data.actions]
        )
    return jsonify({"status": "success", "action_ids": action_ids, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@actions_bp.route('/actions/<int:action_id>', methods=['GET'])
def get_action(action_id: int) -> Tuple[Response, int]:
    with get_session_scope() as session:
        action = verification_ledger.get_action(session, action_id)
    return jsonify({"status": "success", "action": action}), http.HTTPStatus.OK


@actions_bp.route('/actions/<int:action_id>/verify', methods=['POST'])
@require_api_key
@require_account
@validate_with(VerifyActionSchema)
def verify_action(action_id: int) -> Tuple[Response, int]:
    """Records the acting verifier's decision on an action."""
    data: VerifyActionSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        verification_ledger.verify_action(
            tx,
            g.account,
            action_id,
            approved=data.approved,
            actual_credits=data.actual_credits,
            comments=data.comments,
        )
        action = verification_ledger.get_action(tx.session, action_id)
    return jsonify({"status": "success", "action": action, "tx_id": tx.tx_id}), http.HTTPStatus.OK


@actions_bp.route('/companies/<address>', methods=['GET'])
def get_company(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        profile = verification_ledger.get_company_profile(session, address)
        actions = verification_ledger.actions_of(session, address)
    return jsonify({"status": "success", "profile": profile, "actions": actions}), http.HTTPStatus.OK
