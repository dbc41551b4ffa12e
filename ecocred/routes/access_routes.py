# ecocred/routes/access_routes.py
import http
import logging
from typing import Tuple, Union

from flask import Blueprint, Response, g, jsonify
from pydantic import BaseModel

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.access_control import access_control
from ecocred.systems.chain import ledger_transaction
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import Address, validate_with

logger = logging.getLogger(__name__)
access_bp = Blueprint('access', __name__, url_prefix='/api/v1/access')


class GrantRoleSchema(BaseModel):
    account: Address
    # Role name ("VERIFIER") or number (2); parsed by the registry.
    role: Union[int, str]


@access_bp.route('/roles', methods=['POST'])
@require_api_key
@require_account
@validate_with(GrantRoleSchema)
def grant_role() -> Tuple[Response, int]:
    data: GrantRoleSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        access_control.grant_role(tx, g.account, data.account, data.role)
        role = access_control.role_of(tx.session, data.account)
    return jsonify({
        "status": "success",
        "account": data.account.lower(),
        "role": role.name,
        "tx_id": tx.tx_id,
    }), http.HTTPStatus.OK


@access_bp.route('/roles/<address>', methods=['GET'])
def get_role(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        role = access_control.role_of(session, address)
    return jsonify({"status": "success", "account": address.lower(), "role": role.name, "role_id": int(role)}), http.HTTPStatus.OK
