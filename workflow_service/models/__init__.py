from workflow_service.models.order import Order, ORDER_STATUSES
from workflow_service.models.dispute import Dispute
from workflow_service.models.conversation import Conversation, ConversationParticipant
from workflow_service.models.message import Message

__all__ = [
    "Order",
    "ORDER_STATUSES",
    "Dispute",
    "Conversation",
    "ConversationParticipant",
    "Message",
]
