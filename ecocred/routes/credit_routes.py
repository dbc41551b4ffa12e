# ecocred/routes/credit_routes.py
import http
import logging
from typing import List, Optional, Tuple

from flask import Blueprint, Response, g, jsonify
from pydantic import BaseModel, Field

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.credit_token import credit_token
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import Address, Uint, validate_with

logger = logging.getLogger(__name__)
credits_bp = Blueprint('credits', __name__, url_prefix='/api/v1/credits')


# --- Pydantic Input Models ---
class TransferSchema(BaseModel):
    to: Address
    amount: Uint


class ApproveSchema(BaseModel):
    spender: Address
    amount: Uint


class TransferFromSchema(BaseModel):
    owner: Address
    to: Address
    amount: Uint


class BurnSchema(BaseModel):
    amount: Uint
    owner: Optional[Address] = None


class BatchTransferSchema(BaseModel):
    recipients: List[Address] = Field(..., min_length=1)
    amounts: List[Uint] = Field(..., min_length=1)


class MinterSchema(BaseModel):
    minter: Address
    mode: str = Field("add", pattern=r"^(set|add|remove)$")


# --- API Routes ---

@credits_bp.route('/balances/<address>', methods=['GET'])
def get_balance(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        balance = credit_token.balance_of(session, address)
    return jsonify({"status": "success", "address": address.lower(), "balance": str(balance)}), http.HTTPStatus.OK


@credits_bp.route('/allowances/<owner>/<spender>', methods=['GET'])
def get_allowance(owner: str, spender: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        amount = credit_token.allowance(session, owner, spender)
    return jsonify({"status": "success", "allowance": str(amount)}), http.HTTPStatus.OK


@credits_bp.route('/supply', methods=['GET'])
def get_supply() -> Tuple[Response, int]:
    with get_session_scope() as session:
        body = {
            "status": "success",
            "name": credit_token.name,
            "symbol": credit_token.symbol,
            "decimals": credit_token.decimals,
            "total_supply": str(credit_token.total_supply(session)),
            "total_burned": str(credit_token.total_burned(session)),
            "owner": credit_token.owner(session),
        }
    return jsonify(body), http.HTTPStatus.OK


@credits_bp.route('/transfer', methods=['POST'])
@require_api_key
@require_account
@validate_with(TransferSchema)
def transfer() -> Tuple[Response, int]:
    data: TransferSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        credit_token.transfer(tx, g.account, data.to, data.amount)
        tx_id = tx.tx_id
    return jsonify({"status": "success", "tx_id": tx_id}), http.HTTPStatus.OK


@credits_bp.route('/approve', methods=['POST'])
@require_api_key
@require_account
@validate_with(ApproveSchema)
def approve() -> Tuple[Response, int]:
    data: ApproveSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        credit_token.approve(tx, g.account, data.spender, data.amount)
        tx_id = tx.tx_id
    return jsonify({"status": "success", "tx_id": tx_id}), http.HTTPStatus.OK


@credits_bp.route('/transfer-from', methods=['POST'])
@require_api_key
@require_account
@validate_with(TransferFromSchema)
def transfer_from() -> Tuple[Response, int]:
    data: TransferFromSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        credit_token.transfer_from(tx, g.account, data.owner, data.to, data.amount)
        tx_id = tx.tx_id
    return jsonify({"status": "success", "tx_id": tx_id}), http.HTTPStatus.OK


@credits_bp.route('/burn', methods=['POST'])
@require_api_key
@require_account
@validate_with(BurnSchema)
def burn() -> Tuple[Response, int]:
    """Burns the caller's credits, or ``owner``'s through an allowance."""
    data: BurnSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        if data.owner:
            credit_token.burn_from(tx, g.account, data.owner, data.amount)
        else:
            credit_token.burn(tx, g.account, data.amount)
        tx_id = tx.tx_id
    return jsonify({"status": "success", "tx_id": tx_id}), http.HTTPStatus.OK


@credits_bp.route('/batch-transfer', methods=['POST'])
@require_api_key
@require_account
@validate_with(BatchTransferSchema)
def batch_transfer() -> Tuple[Response, int]:
    data: BatchTransferSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        credit_token.batch_transfer(tx, g.account, data.recipients, data.amounts)
        tx_id = tx.tx_id
    return jsonify({"status": "success", "tx_id": tx_id, "count": len(data.recipients)}), http.HTTPStatus.OK


@credits_bp.route('/minters', methods=['GET'])
def list_minters() -> Tuple[Response, int]:
    with get_session_scope() as session:
        minters = credit_token.minters(session)
    return jsonify({"status": "success", "minters": minters}), http.HTTPStatus.OK


@credits_bp.route('/minters', methods=['POST'])
@require_api_key
@require_account
@validate_with(MinterSchema)
def update_minters() -> Tuple[Response, int]:
    """Owner-only: replace the minter set, or add/remove one minter."""
    data: MinterSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        if data.mode == "set":
            credit_token.set_minter(tx, g.account, data.minter)
        elif data.mode == "remove":
            credit_token.remove_minter(tx, g.account, data.minter)
        else:
            credit_token.add_minter(tx, g.account, data.minter)
        minters = credit_token.minters(tx.session)
    return jsonify({"status": "success", "minters": minters}), http.HTTPStatus.OK
