from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from workflow_service.errors import InvalidArgument
from workflow_service.services.order_service import (
    create_order,
    get_order,
    get_orders_for_user,
    request_transition,
)

orders_bp = Blueprint('orders', __name__)


@orders_bp.route('/orders', methods=['POST'])
@jwt_required()
def create_order_route():
    """
    Place an order (caller becomes the buyer)
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - vendorId
            - items
            - total
          properties:
            vendorId:
              type: string
            items:
              type: array
              items:
                type: object
                properties:
                  productId:
                    type: string
                  quantity:
                    type: integer
            total:
              type: number
    responses:
      201:
        description: Order created with status 'new'
      400:
        description: Malformed order
    """
    data = request.get_json(silent=True) or {}
    order = create_order(
        buyer_id=get_jwt_identity(),
        vendor_id=data.get('vendorId'),
        items=data.get('items'),
        total=data.get('total'),
    )
    return jsonify(order.to_dict()), 201


@orders_bp.route('/orders', methods=['GET'])
@jwt_required()
def list_orders_route():
    """
    Orders where the caller is buyer or vendor, newest first
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: "{results: Order[]}"
    """
    orders = get_orders_for_user(get_jwt_identity())
    return jsonify({'results': [o.to_dict() for o in orders]}), 200


@orders_bp.route('/orders/<order_id>', methods=['GET'])
@jwt_required()
def get_order_route(order_id):
    """
    Get a single order
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: path
        name: order_id
        required: true
        type: string
    responses:
      200:
        description: Order
      403:
        description: Caller is neither buyer nor vendor
      404:
        description: Order not found
    """
    order = get_order(order_id, get_jwt_identity())
    return jsonify(order.to_dict()), 200


# PUT /orders/<order_id>/status
# new → processing → shipped → delivered, any non-terminal → cancelled
# Rejected with 409 while a dispute is open
@orders_bp.route('/orders/<order_id>/status', methods=['PUT'])
@jwt_required()
def update_order_status_route(order_id):
    """
    Advance an order through its lifecycle (vendor only)
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: path
        name: order_id
        required: true
        type: string
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - status
          properties:
            status:
              type: string
              enum: [new, processing, shipped, delivered, cancelled]
            note:
              type: string
    responses:
      200:
        description: Updated order
      400:
        description: Missing status
      403:
        description: Caller is not the order's vendor
      404:
        description: Order not found
      409:
        description: Order is locked by an open dispute
      422:
        description: Target status unreachable from the current status
    """
    data = request.get_json(silent=True) or {}
    new_status = data.get('status')
    if not new_status:
        raise InvalidArgument('Status is required')
    if not isinstance(new_status, str):
        raise InvalidArgument('status must be a string')
    note = data.get('note')
    if note is not None and not isinstance(note, str):
        raise InvalidArgument('note must be a string')

    order = request_transition(order_id, get_jwt_identity(), new_status, note=note)
    return jsonify(order.to_dict()), 200
