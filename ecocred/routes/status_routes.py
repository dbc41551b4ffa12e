# ecocred/routes/status_routes.py
import http
from flask import Blueprint, jsonify

from ecocred.systems.status import get_ledger_status

status_bp = Blueprint('status_bp', __name__)


@status_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"}), http.HTTPStatus.OK


@status_bp.route('/api/ledger-status', methods=['GET'])
def ledger_status_endpoint():
    """Returns bootstrap state, supply figures and chain integrity."""
    status = get_ledger_status()
    status_code = http.HTTPStatus.OK if status.get("systemHealthy") else http.HTTPStatus.SERVICE_UNAVAILABLE
    return jsonify(status), status_code
