"""
Order Model — Workflow Service
Status: new | processing | shipped | delivered | cancelled
"""

import uuid
from datetime import datetime, timezone
from workflow_service.extensions import db
from workflow_service.store import isoformat

ORDER_STATUSES = ("new", "processing", "shipped", "delivered", "cancelled")


class Order(db.Model):
    __tablename__ = "orders"

    order_id = db.Column(
        db.String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    buyer_id = db.Column(db.String(64), nullable=False, index=True)
    vendor_id = db.Column(db.String(64), nullable=False, index=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    total = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(
        db.Enum(*ORDER_STATUSES, name="order_status"),
        nullable=False,
        default="new"
    )
    # Set while a dispute holds the status lock
    open_dispute_id = db.Column(db.String(36), nullable=True)
    timeline = db.Column(db.JSON, nullable=False, default=list)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # Every UPDATE carries "WHERE version = <read version>"
    __mapper_args__ = {"version_id_col": version}

    def add_timeline_entry(self, status, actor_id, note=""):
        # JSON columns only notice reassignment
        self.timeline = list(self.timeline or []) + [{
            "status": status,
            "actorId": actor_id,
            "date": datetime.now(timezone.utc).isoformat(),
            "note": note or "",
        }]

    def to_dict(self):
        return {
            "objectId":      self.order_id,
            "buyerId":       self.buyer_id,
            "vendorId":      self.vendor_id,
            "items":         self.items,
            "total":         float(self.total),
            "status":        self.status,
            "openDisputeId": self.open_dispute_id,
            "timeline":      self.timeline,
            "createdAt":     isoformat(self.created_at),
            "updatedAt":     isoformat(self.updated_at),
        }
