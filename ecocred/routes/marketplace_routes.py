# ecocred/routes/marketplace_routes.py
import http
import logging
from typing import List, Tuple

from flask import Blueprint, Response, g, jsonify, request
from pydantic import BaseModel, Field

from ecocred.models.db_utils import get_session_scope
from ecocred.systems.chain import ledger_transaction
from ecocred.systems.marketplace import marketplace
from ecocred.utils.auth import require_account, require_api_key
from ecocred.utils.validation import Address, Uint, validate_with

logger = logging.getLogger(__name__)
marketplace_bp = Blueprint('marketplace', __name__, url_prefix='/api/v1/marketplace')


# --- Pydantic Input Models ---
class CreateListingSchema(BaseModel):
    amount: Uint
    price_per_credit: Uint


class BatchListingsSchema(BaseModel):
    amounts: List[Uint] = Field(..., min_length=1)
    prices: List[Uint] = Field(..., min_length=1)


class PurchaseSchema(BaseModel):
    amount: Uint
    payment: Uint


class WithdrawSchema(BaseModel):
    amount: Uint


class FeeRecipientSchema(BaseModel):
    recipient: Address


# --- API Routes ---

@marketplace_bp.route('/listings', methods=['POST'])
@require_api_key
@require_account
@validate_with(CreateListingSchema)
def create_listing() -> Tuple[Response, int]:
    data: CreateListingSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        listing_id = marketplace.create_listing(tx, g.account, data.amount, data.price_per_credit)
        listing = marketplace.get_listing(tx.session, listing_id)
    return jsonify({"status": "success", "listing": listing, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@marketplace_bp.route('/listings/batch', methods=['POST'])
@require_api_key
@require_account
@validate_with(BatchListingsSchema)
def batch_create_listings() -> Tuple[Response, int]:
    data: BatchListingsSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        listing_ids = marketplace.batch_create_listings(tx, g.account, data.amounts, data.prices)
    return jsonify({"status": "success", "listing_ids": listing_ids, "tx_id": tx.tx_id}), http.HTTPStatus.CREATED


@marketplace_bp.route('/listings', methods=['GET'])
def list_listings() -> Tuple[Response, int]:
    """Lists active listings, optionally for one seller."""
    seller = request.args.get('seller')
    with get_session_scope() as session:
        listings = marketplace.active_listings(session, seller=seller)
    return jsonify({"status": "success", "listings": listings}), http.HTTPStatus.OK


@marketplace_bp.route('/listings/<int:listing_id>', methods=['GET'])
def get_listing(listing_id: int) -> Tuple[Response, int]:
    with get_session_scope() as session:
        listing = marketplace.get_listing(session, listing_id)
    return jsonify({"status": "success", "listing": listing}), http.HTTPStatus.OK


@marketplace_bp.route('/listings/<int:listing_id>/purchase', methods=['POST'])
@require_api_key
@require_account
@validate_with(PurchaseSchema)
def purchase(listing_id: int) -> Tuple[Response, int]:
    data: PurchaseSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        result = marketplace.purchase(tx, g.account, listing_id, data.amount, data.payment)
    return jsonify({"status": "success", **result, "tx_id": tx.tx_id}), http.HTTPStatus.OK


@marketplace_bp.route('/listings/<int:listing_id>/cancel', methods=['POST'])
@require_api_key
@require_account
def cancel_listing(listing_id: int) -> Tuple[Response, int]:
    with ledger_transaction(g.block_time) as tx:
        marketplace.cancel_listing(tx, g.account, listing_id)
        listing = marketplace.get_listing(tx.session, listing_id)
    return jsonify({"status": "success", "listing": listing, "tx_id": tx.tx_id}), http.HTTPStatus.OK


@marketplace_bp.route('/balances/<address>', methods=['GET'])
def native_balance(address: str) -> Tuple[Response, int]:
    with get_session_scope() as session:
        balance = marketplace.native_balance_of(session, address)
    return jsonify({"status": "success", "address": address.lower(), "balance": str(balance)}), http.HTTPStatus.OK


@marketplace_bp.route('/withdraw', methods=['POST'])
@require_api_key
@require_account
@validate_with(WithdrawSchema)
def withdraw() -> Tuple[Response, int]:
    data: WithdrawSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        remaining = marketplace.withdraw_native(tx, g.account, data.amount)
    return jsonify({"status": "success", "remaining": str(remaining), "tx_id": tx.tx_id}), http.HTTPStatus.OK


@marketplace_bp.route('/fee-recipient', methods=['GET'])
def get_fee_recipient() -> Tuple[Response, int]:
    with get_session_scope() as session:
        recipient = marketplace.fee_recipient(session)
        fee_bps = marketplace.platform_fee_bps(session)
    return jsonify({"status": "success", "recipient": recipient, "fee_bps": fee_bps}), http.HTTPStatus.OK


@marketplace_bp.route('/fee-recipient', methods=['POST'])
@require_api_key
@require_account
@validate_with(FeeRecipientSchema)
def set_fee_recipient() -> Tuple[Response, int]:
    """Owner-only: where future platform fees are credited."""
    data: FeeRecipientSchema = g.validated_data
    with ledger_transaction(g.block_time) as tx:
        marketplace.set_fee_recipient(tx, g.account, data.recipient)
    return jsonify({"status": "success", "recipient": data.recipient.lower(), "tx_id": tx.tx_id}), http.HTTPStatus.OK
