# ecocred/routes/governance_routes.py
import http
import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, g, jsonify, request
from pydantic import BaseModel, Field

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.governance import governance
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import validate_with

logger = logging.getLogger(__name__)
governance_bp = Blueprint('governance', __name__, url_prefix='/api/v1/governance')


# --- Pydantic Input Models ---
class CreateProposalSchema(BaseModel):
    description: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    data: Dict[str, Any]


class VoteSchema(BaseModel):
    support: bool


# --- API Routes ---

@governance_bp.route('/proposals', methods=['POST'])
@require_api_key
@require_account
@validate_with(CreateProposalSchema)
def create_proposal() -> Tuple[Response, int]:
    """Creates a new proposal, authored by the acting account."""
    data: CreateProposalSchema = g.validated_data
    logger.info(f"📥 API: Received proposal creation request from {g.account}")
    with ledger_transaction(g.block_time) as tx:
        proposal_id = governance.create_proposal(tx, g.account, data.description, data.target, data.data)
        proposal = governance.get_proposal(tx.session, proposal_id, now=tx.now)
    return jsonify({
        "status": "success",
        "message": "Proposal created successfully.",
        "proposal": proposal,
        "tx_id": tx.tx_id,
    }), http.HTTPStatus.CREATED


@governance_bp.route('/proposals/<int:proposal_id>', methods=['GET'])
def get_proposal(proposal_id: int) -> Tuple[Response, int]:
    """Gets a proposal with its state as of ``?at=<unix seconds>`` (default now)."""
    at = request.args.get('at', type=int)
    with get_session_scope() as session:
        proposal = governance.get_proposal(session, proposal_id, now=at)
    return jsonify({"status": "success", "proposal": proposal}), http.HTTPStatus.OK


@governance_bp.route('/proposals/<int:proposal_id>/vote', methods=['POST'])
@require_api_key
@require_account
@validate_with(VoteSchema)
def vote(proposal_id: int) -> Tuple[Response, int]:
    data: VoteSchema = g.validated_data
    logger.info(f"📥 API: Received vote for proposal {proposal_id} from {g.account}.")
    with ledger_transaction(g.block_time) as tx:
        proposal = governance.vote(tx, g.account, proposal_id, data.support)
    return jsonify({"status": "success", "proposal": proposal, "tx_id": tx.tx_id}), http.HTTPStatus.OK


@governance_bp.route('/proposals/<int:proposal_id>/execute', methods=['POST'])
@require_api_key
@require_account
def execute(proposal_id: int) -> Tuple[Response, int]:
    with ledger_transaction(g.block_time) as tx:
        proposal = governance.execute_proposal(tx, g.account, proposal_id)
    return jsonify({"status": "success", "proposal": proposal, "tx_id": tx.tx_id}), http.HTTPStatus.OK
