"""
Message Service — Workflow Service
Appends to a conversation and reads it back in send order.
"""

import logging
from datetime import datetime, timezone

from flask import current_app

from workflow_service import store
from workflow_service.errors import Forbidden, InvalidArgument, NotFound, WorkflowError
from workflow_service.extensions import db
from workflow_service.models.conversation import Conversation
from workflow_service.models.message import Message
from workflow_service.services.access_policy import can_access_conversation
from workflow_service.services.conversation_service import get_conversation

logger = logging.getLogger(__name__)


def _validate_text(text):
    if not isinstance(text, str) or not text.strip():
        raise InvalidArgument("Conversation ID and text required")
    max_length = current_app.config.get("MESSAGE_MAX_LENGTH", 4000)
    if len(text) > max_length:
        raise InvalidArgument(f"text exceeds {max_length} characters")


def send_message(caller_id, conversation_id, text, attachments=None):
    """
    The conversation row is held while the next seq is computed, so two
    senders in the same conversation never get the same position.
    """
    if not conversation_id or not isinstance(conversation_id, str):
        raise InvalidArgument("Conversation ID and text required")
    _validate_text(text)
    if attachments is not None and (
        not isinstance(attachments, list) or not all(isinstance(a, str) for a in attachments)
    ):
        raise InvalidArgument("attachments must be a list of strings")

    conversation = store.fetch_for_update(Conversation, conversation_id=conversation_id)
    try:
        if not conversation:
            raise NotFound("Conversation not found")
        if not can_access_conversation(caller_id, conversation):
            raise Forbidden("Access denied")
    except WorkflowError:
        db.session.rollback()
        raise

    last_seq = (
        db.session.query(db.func.max(Message.seq))
        .filter(Message.conversation_id == conversation_id)
        .scalar()
    ) or 0

    # created_at never goes backwards inside a conversation
    now = datetime.now(timezone.utc)
    last_at = store.as_utc(conversation.last_message_at)
    created_at = max(now, last_at) if last_at else now

    message = Message(
        conversation_id=conversation_id,
        sender_id=caller_id,
        text=text,
        attachments=attachments or [],
        seq=last_seq + 1,
        created_at=created_at,
    )
    db.session.add(message)
    conversation.last_message_at = created_at
    store.commit_or_conflict("Concurrent message append; retry")

    logger.debug(f"Message {message.message_id} appended to {conversation_id} at seq {message.seq}")
    return message


def list_messages(caller_id, conversation_id):
    get_conversation(conversation_id, caller_id)

    query = (
        Message.query
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.seq.asc())
    )
    return store.fetch_all(query)
