"""
Dispute Model — Workflow Service
Status: open | resolved
"""

import uuid
from datetime import datetime, timezone
from workflow_service.extensions import db
from workflow_service.store import isoformat


class Dispute(db.Model):
    __tablename__ = "disputes"

    dispute_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = db.Column(db.String(36), db.ForeignKey("orders.order_id"), nullable=False, index=True)
    initiator_id = db.Column(db.String(64), nullable=False)
    respondent_id = db.Column(db.String(64), nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    amount_requested = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    evidence = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.Enum("open", "resolved", name="dispute_status"), nullable=False, default="open")
    resolution = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            "objectId":        self.dispute_id,
            "orderId":         self.order_id,
            "initiatorId":     self.initiator_id,
            "respondentId":    self.respondent_id,
            "reason":          self.reason,
            "description":     self.description,
            "amountRequested": float(self.amount_requested or 0),
            "evidence":        self.evidence,
            "status":          self.status,
            "resolution":      self.resolution,
            "createdAt":       isoformat(self.created_at),
            "resolvedAt":      isoformat(self.resolved_at),
        }
