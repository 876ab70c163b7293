"""
Message Model — Workflow Service
Ordered within a conversation by (created_at, seq).
"""

import uuid
from workflow_service.extensions import db
from workflow_service.store import isoformat


class Message(db.Model):
    __tablename__ = "messages"
    __table_args__ = (
        db.UniqueConstraint("conversation_id", "seq", name="uq_message_conversation_seq"),
    )

    message_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = db.Column(
        db.String(36),
        db.ForeignKey("conversations.conversation_id"),
        nullable=False,
        index=True
    )
    sender_id = db.Column(db.String(64), nullable=False)
    text = db.Column(db.Text, nullable=False)
    attachments = db.Column(db.JSON, nullable=False, default=list)
    seq = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self):
        return {
            "objectId":       self.message_id,
            "conversationId": self.conversation_id,
            "senderId":       self.sender_id,
            "text":           self.text,
            "attachments":    self.attachments,
            "seq":            self.seq,
            "createdAt":      isoformat(self.created_at),
        }
