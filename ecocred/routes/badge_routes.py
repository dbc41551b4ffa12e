# ecocred/routes/badge_routes.py
import http
from typing import Tuple

from flask import Blueprint, Response, jsonify

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.badge_registry import badge_registry

badges_bp = Blueprint('badges', __name__, url_prefix='/api/v1/badges')


@badges_bp.route('/<int:badge_id>', methods=['GET'])
def get_badge(badge_id: int) -> Tuple[Response, int]:
    with get_session_scope() as session:
        badge = badge_registry.get_badge(session, badge_id)
    return jsonify({"status": "success", "badge": badge}), http.HTTPStatus.OK


@badges_bp.route('/owner/<address>', methods=['GET'])
def badges_of_owner(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        badge_ids = badge_registry.tokens_of_owner(session, address)
    return jsonify({"status": "success", "owner": address.lower(), "badges": badge_ids}), http.HTTPStatus.OK
