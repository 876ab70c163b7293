"""
Conversation Service — Workflow Service
Fixed-membership conversations and the per-user inbox.
"""

import logging
import uuid

from workflow_service import store
from workflow_service.errors import Forbidden, InvalidArgument, NotFound
from workflow_service.extensions import db
from workflow_service.models.conversation import Conversation, ConversationParticipant
from workflow_service.services.access_policy import can_access_conversation
from workflow_service.services.order_service import MAX_ID_LENGTH

logger = logging.getLogger(__name__)

MAX_TYPE_LENGTH = 50


def _normalize_participants(participants):
    if not isinstance(participants, list):
        raise InvalidArgument("participants must be a list")

    seen = []
    for participant in participants:
        if not isinstance(participant, str) or not participant:
            raise InvalidArgument("participants must be non-empty identifiers")
        if len(participant) > MAX_ID_LENGTH:
            raise InvalidArgument(f"participant ids are limited to {MAX_ID_LENGTH} characters")
        if participant not in seen:
            seen.append(participant)
    return seen


def create_conversation(caller_id, conversation_type, participants, context=None):
    if not conversation_type or not isinstance(conversation_type, str):
        raise InvalidArgument("Type and participants array required")
    if len(conversation_type) > MAX_TYPE_LENGTH:
        raise InvalidArgument(f"type exceeds {MAX_TYPE_LENGTH} characters")
    if context is not None and not isinstance(context, dict):
        raise InvalidArgument("context must be an object")

    members = _normalize_participants(participants)
    if caller_id not in members:
        raise InvalidArgument("You must be a participant")
    if len(members) < 2:
        raise InvalidArgument("A conversation needs at least two distinct participants")

    conversation = Conversation(
        conversation_id=str(uuid.uuid4()),
        type=conversation_type,
        context=context or {},
    )
    conversation.participant_links = [
        ConversationParticipant(user_id=member, position=position)
        for position, member in enumerate(members)
    ]
    db.session.add(conversation)
    store.commit_or_conflict()

    logger.info(f"Conversation {conversation.conversation_id} ({conversation_type}) created by {caller_id}")
    return conversation


def _inbox_query(caller_id):
    return (
        Conversation.query
        .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.conversation_id)
        .filter(ConversationParticipant.user_id == caller_id)
        .order_by(Conversation.created_at.desc(), Conversation.seq.desc())
    )


def list_conversations(caller_id, page=None, per_page=20):
    """
    Newest conversation first. Without a page, every conversation the
    caller belongs to is returned.
    """
    query = _inbox_query(caller_id)
    if page is None:
        return {"data": store.fetch_all(query), "pagination": None}

    if page < 1 or per_page < 1:
        raise InvalidArgument("page and per_page must be positive")

    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        "data": pagination.items,
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": pagination.total,
            "total_pages": pagination.pages,
        },
    }


def get_conversation(conversation_id, caller_id):
    conversation = store.fetch(Conversation, conversation_id=conversation_id)
    if not conversation:
        raise NotFound("Conversation not found")
    if not can_access_conversation(caller_id, conversation):
        raise Forbidden("Access denied")
    return conversation
