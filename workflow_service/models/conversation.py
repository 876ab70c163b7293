"""
Conversation Model — Workflow Service
Participants are fixed at creation; there is no path that edits them.
"""

import uuid
from datetime import datetime, timezone
from workflow_service.extensions import db
from workflow_service.store import isoformat


class ConversationParticipant(db.Model):
    __tablename__ = "conversation_participants"

    conversation_id = db.Column(
        db.String(36),
        db.ForeignKey("conversations.conversation_id"),
        primary_key=True
    )
    user_id = db.Column(db.String(64), primary_key=True, index=True)
    position = db.Column(db.Integer, nullable=False)


class Conversation(db.Model):
    __tablename__ = "conversations"

    # insertion order; breaks ties between equal created_at values in the inbox
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    conversation_id = db.Column(
        db.String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4())
    )
    type = db.Column(db.String(50), nullable=False)
    context = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True
    )
    last_message_at = db.Column(db.DateTime(timezone=True), nullable=True)

    participant_links = db.relationship(
        "ConversationParticipant",
        lazy="selectin",
        order_by="ConversationParticipant.position",
        cascade="all, delete-orphan",
    )

    @property
    def participants(self):
        return [link.user_id for link in self.participant_links]

    def to_dict(self):
        return {
            "objectId":      self.conversation_id,
            "type":          self.type,
            "participants":  self.participants,
            "context":       self.context,
            "createdAt":     isoformat(self.created_at),
            "lastMessageAt": isoformat(self.last_message_at),
        }
