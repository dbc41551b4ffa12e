# ecocred/routes/analytics_routes.py
import http
from typing import Tuple

from flask import Blueprint, Response, jsonify, request

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.analytics import analytics
from ecocred.systems.leaderboard import leaderboard

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/v1')


@analytics_bp.route('/leaderboard', methods=['GET'])
def get_leaderboard() -> Tuple[Response, int]:
    limit = min(request.args.get('limit', default=10, type=int), 100)
    with get_session_scope() as session:
        entries = leaderboard.top_companies(session, limit)
    return jsonify({"status": "success", "leaderboard": entries}), http.HTTPStatus.OK


@analytics_bp.route('/analytics/overview', methods=['GET'])
def overview() -> Tuple[Response, int]:
    with get_session_scope() as session:
        body = {
            "status": "success",
            "platform": analytics.platform_stats(session),
            "credits": analytics.credit_distribution(session),
            "actions": analytics.action_stats(session),
        }
    return jsonify(body), http.HTTPStatus.OK


@analytics_bp.route('/analytics/companies/<address>', methods=['GET'])
def company(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        body = analytics.company_analytics(session, address)
        body["leaderboard_position"] = leaderboard.position_of(session, address)
    return jsonify({"status": "success", "company": body}), http.HTTPStatus.OK
