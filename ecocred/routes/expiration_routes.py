# ecocred/routes/expiration_routes.py
import http
import logging
import time
from typing import Tuple

from flask import Blueprint, Response, g, jsonify, request

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.expiration import expiration_registry
from ecocred.utils.auth import require_account, require_api_key

logger = logging.getLogger(__name__)
expiration_bp = Blueprint('expiration', __name__, url_prefix='/api/v1/expiration')


def _as_of() -> int:
    at = request.args.get('at', type=int)
    return at if at is not None else int(time.time())


@expiration_bp.route('/status/<address>', methods=['GET'])
def get_status(address: str) -> Tuple[Response, int]:
    """Batch counts and amounts for a holder as of ``?at=<unix seconds>`` (default now)."""
    with get_session_scope() as session:
        status = expiration_registry.get_expiration_status(session, address, _as_of())
    return jsonify({"status": "success", "expiration": status}), http.HTTPStatus.OK


@expiration_bp.route('/batches/<address>', methods=['GET'])
def list_batches(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        batches = expiration_registry.get_credit_batches(session, address, _as_of())
    return jsonify({"status": "success", "batches": batches}), http.HTTPStatus.OK


@expiration_bp.route('/batches/<address>/<int:batch_index>', methods=['GET'])
def get_batch(address: str, batch_index: int) -> Tuple[Response, int]:
    with get_session_scope() as session:
        batch = expiration_registry.get_credit_batch(session, address, batch_index, _as_of())
    return jsonify({"status": "success", "batch": batch}), http.HTTPStatus.OK


@expiration_bp.route('/check/<address>', methods=['POST'])
@require_api_key
@require_account
def check_and_expire(address: str) -> Tuple[Response, int]:
    """Anyone may trigger expiry of a holder's lapsed batches."""
    with ledger_transaction(g.block_time) as tx:
        burned = expiration_registry.check_and_expire(tx, g.account, address)
        status = expiration_registry.get_expiration_status(tx.session, address, tx.now)
    return jsonify({
        "status": "success", "expired": str(burned), "expiration": status, "tx_id": tx.tx_id
    }), http.HTTPStatus.OK
