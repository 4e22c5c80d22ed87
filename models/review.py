from datetime import datetime
from models.db import db


def mask_name(name: str) -> str:
    """Public display name: first name plus last initial, or a clipped single name."""
    parts = name.strip().split()
    if len(parts) > 1:
        return f"{parts[0]} {parts[-1][0]}."
    name = name.strip()
    if len(name) <= 3:
        return name
    return name[:3] + "*" * min(len(name) - 3, 4)


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)

    user_name = db.Column(db.String(100), nullable=False)
    user_phone = db.Column(db.String(10), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=True)
    booking_ref = db.Column(db.String(30), nullable=True)

    rating = db.Column(db.Integer, nullable=False)
    review_text = db.Column(db.String(500), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="PENDING")
    approved_at = db.Column(db.DateTime, nullable=True)
    approved_by = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # NULL booking_ref rows never collide
        db.UniqueConstraint("user_phone", "booking_ref", name="uq_review_phone_booking"),
        db.Index("ix_reviews_status_created", "status", "created_at"),
    )

    def to_public_dict(self):
        return {
            "id": self.id,
            "user_name": mask_name(self.user_name),
            "rating": self.rating,
            "review_text": self.review_text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
        }

    def to_dict(self):
        data = self.to_public_dict()
        data.update({
            "user_name": self.user_name,
            "user_phone": self.user_phone,
            "user_email": self.user_email,
            "booking_ref": self.booking_ref,
            "status": self.status,
            "approved_by": self.approved_by,
        })
        return data
