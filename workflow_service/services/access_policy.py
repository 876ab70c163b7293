"""
Access Control Policy — Workflow Service
Pure predicates; no lookups, no side effects.
"""


def can_access_order(caller_id, order):
    return caller_id is not None and caller_id in (order.buyer_id, order.vendor_id)


def can_drive_status(caller_id, order):
    """Only the assigned vendor moves an order through its lifecycle."""
    return caller_id is not None and caller_id == order.vendor_id


def can_open_dispute(caller_id, order):
    return caller_id is not None and caller_id == order.buyer_id


def can_access_conversation(caller_id, conversation):
    return caller_id is not None and caller_id in conversation.participants
