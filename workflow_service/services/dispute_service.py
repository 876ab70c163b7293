"""
Dispute Service — Workflow Service
Opening a dispute sets the order's status lock; resolving clears it.
Both hold the order row for the whole check-then-act window.
"""

import logging
from datetime import datetime, timezone

from workflow_service import store
from workflow_service.errors import Conflict, Forbidden, InvalidArgument, NotFound, WorkflowError
from workflow_service.extensions import db
from workflow_service.models.dispute import Dispute
from workflow_service.models.order import Order
from workflow_service.services.access_policy import can_access_order, can_open_dispute
from workflow_service.services.order_service import parse_amount

logger = logging.getLogger(__name__)


def open_dispute(order_id, caller_id, reason, description=None, amount_requested=None, evidence=None):
    if not order_id or not reason:
        raise InvalidArgument("Order ID and Reason are required")
    if not isinstance(order_id, str) or not isinstance(reason, str):
        raise InvalidArgument("orderId and reason must be strings")
    if len(reason) > 255:
        raise InvalidArgument("reason exceeds 255 characters")
    if description is not None and not isinstance(description, str):
        raise InvalidArgument("description must be a string")
    amount = parse_amount(amount_requested if amount_requested is not None else 0, "amountRequested")
    if evidence is not None and (
        not isinstance(evidence, list) or not all(isinstance(e, str) for e in evidence)
    ):
        raise InvalidArgument("evidence must be a list of URLs")

    order = store.fetch_for_update(Order, order_id=order_id)
    try:
        if not order:
            raise NotFound("Order not found")
        if not can_open_dispute(caller_id, order):
            raise Forbidden("You can only dispute your own orders")
        if order.open_dispute_id:
            raise Conflict("An active dispute already exists for this order")
    except WorkflowError:
        db.session.rollback()
        raise

    dispute = Dispute(
        order_id=order.order_id,
        initiator_id=caller_id,
        respondent_id=order.vendor_id,
        reason=reason,
        description=description,
        amount_requested=amount,
        evidence=evidence or [],
        status="open",
    )
    db.session.add(dispute)
    db.session.flush()

    # Lock the order in the same commit that creates the dispute
    order.open_dispute_id = dispute.dispute_id
    store.commit_or_conflict("Order was modified concurrently; retry with fresh state")

    logger.warning(f"Dispute {dispute.dispute_id} opened on order {order_id}; status transitions locked")
    return dispute


def get_dispute(dispute_id, caller_id):
    dispute = store.fetch(Dispute, dispute_id=dispute_id)
    if not dispute:
        raise NotFound("Dispute not found")

    order = store.fetch(Order, order_id=dispute.order_id)
    if not order or not can_access_order(caller_id, order):
        raise Forbidden("You are not a party to this dispute")
    return dispute


def resolve_dispute(dispute_id, resolution=None):
    """
    Clears the order's dispute lock. The order status is left exactly
    as it was when the dispute was opened.
    """
    dispute = store.fetch(Dispute, dispute_id=dispute_id)
    if not dispute:
        raise NotFound("Dispute not found")

    order = store.fetch_for_update(Order, order_id=dispute.order_id)
    dispute = store.fetch_for_update(Dispute, dispute_id=dispute_id)
    if dispute.status != "open":
        db.session.rollback()
        raise Conflict("Dispute is already resolved")

    dispute.status = "resolved"
    dispute.resolution = resolution
    dispute.resolved_at = datetime.now(timezone.utc)
    if order and order.open_dispute_id == dispute.dispute_id:
        order.open_dispute_id = None
    store.commit_or_conflict("Dispute was modified concurrently; retry with fresh state")

    logger.info(f"Dispute {dispute_id} resolved; order {dispute.order_id} unlocked")
    return dispute
