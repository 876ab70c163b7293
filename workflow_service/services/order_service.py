"""
Order Service — Workflow Service
Order creation, access-checked reads and the status state machine.
"""

import logging
from decimal import Decimal, InvalidOperation

from workflow_service import store
from workflow_service.errors import (
    Conflict,
    Forbidden,
    InvalidArgument,
    InvalidTransition,
    NotFound,
    WorkflowError,
)
from workflow_service.extensions import db
from workflow_service.models.order import Order
from workflow_service.services.access_policy import can_access_order, can_drive_status

logger = logging.getLogger(__name__)

VALID_TRANSITIONS = {
    "new": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered", "cancelled"},
    "delivered": set(),
    "cancelled": set(),
}

TERMINAL_STATUSES = {status for status, targets in VALID_TRANSITIONS.items() if not targets}

# width of the buyer/vendor/participant id columns
MAX_ID_LENGTH = 64


def _validate_items(items):
    if not isinstance(items, list) or not items:
        raise InvalidArgument("items must be a non-empty list")

    cleaned = []
    for item in items:
        if not isinstance(item, dict) or not item.get("productId"):
            raise InvalidArgument("Each item needs a productId")
        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidArgument("Each item needs a positive integer quantity")
        cleaned.append({"productId": str(item["productId"]), "quantity": quantity})
    return cleaned


def parse_amount(value, field):
    if isinstance(value, bool):
        raise InvalidArgument(f"{field} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f"{field} must be a number")
    if not amount.is_finite() or amount < 0:
        raise InvalidArgument(f"{field} must be a non-negative number")
    return amount


def create_order(buyer_id, vendor_id, items, total):
    """
    Buyer places an order against a vendor. Starts in 'new'
    with a single timeline entry.
    """
    if not vendor_id:
        raise InvalidArgument("Missing field: vendorId")
    if not isinstance(vendor_id, str) or len(vendor_id) > MAX_ID_LENGTH:
        raise InvalidArgument(f"vendorId must be a string of at most {MAX_ID_LENGTH} characters")
    if vendor_id == buyer_id:
        raise InvalidArgument("Buyer and vendor must differ")
    if total is None:
        raise InvalidArgument("Missing field: total")

    order = Order(
        buyer_id=buyer_id,
        vendor_id=str(vendor_id),
        items=_validate_items(items),
        total=parse_amount(total, "total"),
        status="new",
        timeline=[],
    )
    order.add_timeline_entry("new", buyer_id, "Order placed")
    db.session.add(order)
    store.commit_or_conflict()
    logger.info(f"Order {order.order_id} created by buyer {buyer_id} for vendor {vendor_id}")
    return order


def get_order(order_id, caller_id):
    order = store.fetch(Order, order_id=order_id)
    if not order:
        raise NotFound("Order not found")
    if not can_access_order(caller_id, order):
        raise Forbidden("You are not a party to this order")
    return order


def get_orders_for_user(caller_id):
    query = Order.query.filter(
        db.or_(Order.buyer_id == caller_id, Order.vendor_id == caller_id)
    ).order_by(Order.created_at.desc())
    return store.fetch_all(query)


def request_transition(order_id, caller_id, target_status, note=None):
    """
    Moves an order along VALID_TRANSITIONS.

    Checks run in a fixed order: existence, vendor authorization,
    dispute lock, then the transition graph. The order row stays
    locked from the read until the commit, and the commit itself is
    conditional on the version that was read.
    """
    order = store.fetch_for_update(Order, order_id=order_id)
    try:
        if not order:
            raise NotFound("Order not found")

        if not can_drive_status(caller_id, order):
            raise Forbidden("Only the vendor can update order status")

        if order.open_dispute_id:
            logger.info(
                f"Transition of order {order_id} to {target_status} blocked by dispute {order.open_dispute_id}"
            )
            raise Conflict("Order is locked due to an active dispute.")

        allowed = VALID_TRANSITIONS.get(order.status, set())
        if target_status not in allowed:
            raise InvalidTransition(f"Cannot transition from {order.status} to {target_status}")
    except WorkflowError:
        # release the row lock
        db.session.rollback()
        raise

    previous = order.status
    order.status = target_status
    order.add_timeline_entry(target_status, caller_id, note)
    store.commit_or_conflict("Order was modified concurrently; retry with fresh state")

    logger.info(f"Order {order_id}: {previous} -> {target_status} by {caller_id}")
    return order
