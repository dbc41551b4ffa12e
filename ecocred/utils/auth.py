# ecocred/utils/auth.py
"""
Request guards for the write-through API.

Authentication of end users belongs to the upstream service; the ledger only
checks that the request comes from a trusted service (API key) and reads the
acting account it vouches for.
"""
import http
import logging
from functools import wraps

from flask import current_app, g, jsonify, request

from ecocred.utils.addresses import is_address

logger = logging.getLogger(__name__)


def require_api_key(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = request.headers.get('X-API-Key')
        if not api_key:
            logger.warning(f"Missing API key on {request.method} {request.path}")
            return jsonify({"status": "error", "error": "Unauthorized", "message": "Missing API key"}), http.HTTPStatus.UNAUTHORIZED
        if api_key not in current_app.config.get('LEDGER_API_KEYS', []):
            logger.warning(f"Invalid API key attempted on {request.method} {request.path}")
            return jsonify({"status": "error", "error": "Unauthorized", "message": "Invalid API key"}), http.HTTPStatus.UNAUTHORIZED
        g.api_key = api_key
        return f(*args, **kwargs)
    return decorated


def require_account(f):
    """Reads the acting account and optional block timestamp into ``g``."""
    @wraps(f)
    def decorated(*args, **kwargs):
        account = request.headers.get('X-Account-Address', '')
        if not is_address(account):
            return jsonify({
                "status": "error",
                "error": "InvalidArgument",
                "message": "X-Account-Address header must be a 0x-prefixed 40 hex digit address",
            }), http.HTTPStatus.BAD_REQUEST
        g.account = account.lower()

        block_time = request.headers.get('X-Block-Timestamp')
        g.block_time = None
        if block_time is not None:
            if not (block_time.isascii() and block_time.isdigit()):
                return jsonify({
                    "status": "error",
                    "error": "InvalidArgument",
                    "message": "X-Block-Timestamp must be unix seconds",
                }), http.HTTPStatus.BAD_REQUEST
            g.block_time = int(block_time)
        return f(*args, **kwargs)
    return decorated
