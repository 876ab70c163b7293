import hmac

from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from workflow_service.errors import Forbidden
from workflow_service.services.dispute_service import get_dispute, open_dispute, resolve_dispute

disputes_bp = Blueprint('disputes', __name__)


@disputes_bp.route('/disputes', methods=['POST'])
@jwt_required()
def open_dispute_route():
    """
    Open a dispute on an order (buyer only); locks the order's status
    ---
    tags:
      - Disputes
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - orderId
            - reason
          properties:
            orderId:
              type: string
            reason:
              type: string
            description:
              type: string
            amountRequested:
              type: number
            evidence:
              type: array
              items:
                type: string
    responses:
      201:
        description: Dispute created
      400:
        description: Missing orderId or reason
      403:
        description: Caller is not the buyer
      404:
        description: Order not found
      409:
        description: Order already has an open dispute
    """
    data = request.get_json(silent=True) or {}
    dispute = open_dispute(
        order_id=data.get('orderId'),
        caller_id=get_jwt_identity(),
        reason=data.get('reason'),
        description=data.get('description'),
        amount_requested=data.get('amountRequested'),
        evidence=data.get('evidence'),
    )
    return jsonify(dispute.to_dict()), 201


@disputes_bp.route('/disputes/<dispute_id>', methods=['GET'])
@jwt_required()
def get_dispute_route(dispute_id):
    """
    Get a dispute
    ---
    tags:
      - Disputes
    security:
      - Bearer: []
    responses:
      200:
        description: Dispute
      403:
        description: Caller is not a party to the disputed order
      404:
        description: Dispute not found
    """
    dispute = get_dispute(dispute_id, get_jwt_identity())
    return jsonify(dispute.to_dict()), 200


@disputes_bp.route('/disputes/<dispute_id>/resolve', methods=['POST'])
def resolve_dispute_route(dispute_id):
    """
    Resolve a dispute and unlock its order (operators only)
    ---
    tags:
      - Disputes
    parameters:
      - in: header
        name: X-Admin-Secret
        required: true
        type: string
      - in: body
        name: body
        schema:
          type: object
          properties:
            resolution:
              type: string
    responses:
      200:
        description: Dispute resolved, order status unchanged
      403:
        description: Invalid admin secret
      404:
        description: Dispute not found
      409:
        description: Dispute already resolved
    """
    secret = current_app.config.get('ADMIN_SECRET')
    supplied = request.headers.get('X-Admin-Secret', '')
    if not secret or not hmac.compare_digest(supplied.encode('utf-8'), secret.encode('utf-8')):
        raise Forbidden('Unauthorized: Invalid Admin Secret')

    data = request.get_json(silent=True) or {}
    dispute = resolve_dispute(dispute_id, resolution=data.get('resolution'))
    return jsonify(dispute.to_dict()), 200
