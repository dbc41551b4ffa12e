# ecocred/routes/chain_routes.py
import http
from typing import Tuple

from flask import Blueprint, Response, jsonify, request

from ecocred.systems.chain import get_blocks, get_events

chain_bp = Blueprint('chain', __name__, url_prefix='/api/v1')

MAX_PAGE_SIZE = 200


@chain_bp.route('/events', methods=['GET'])
def list_events() -> Tuple[Response, int]:
    """Finalized events after ``?after=<event id>``, oldest first."""
    after = request.args.get('after', default=0, type=int)
    limit = max(1, min(request.args.get('limit', default=50, type=int), MAX_PAGE_SIZE))
    event_type = request.args.get('type')
    events = get_events(after=after, limit=limit, event_type=event_type)
    next_cursor = events[-1]["id"] if events else after
    return jsonify({"status": "success", "events": events, "next": next_cursor}), http.HTTPStatus.OK


@chain_bp.route('/chain', methods=['GET'])
def list_blocks() -> Tuple[Response, int]:
    after = request.args.get('after', default=-1, type=int)
    limit = max(1, min(request.args.get('limit', default=50, type=int), MAX_PAGE_SIZE))
    blocks = get_blocks(after=after, limit=limit)
    return jsonify({"status": "success", "blocks": blocks}), http.HTTPStatus.OK
