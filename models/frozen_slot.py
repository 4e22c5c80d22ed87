from datetime import datetime
from models.db import db


class FrozenSlot(db.Model):
    __tablename__ = "frozen_slots"

    id = db.Column(db.Integer, primary_key=True)

    ground = db.Column(db.String(20), nullable=False)
    sport = db.Column(db.String(20), nullable=False)
    date = db.Column(db.Date, nullable=False)
    slot = db.Column(db.String(11), nullable=False)

    is_frozen = db.Column(db.Boolean, default=False, nullable=False, index=True)
    frozen_by = db.Column(db.String(120), nullable=True)
    frozen_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # One freeze record per ground, sport, date and slot
        db.UniqueConstraint("ground", "sport", "date", "slot", name="uq_frozen_slot"),
        db.Index("ix_frozen_slots_ground_date", "ground", "date", "is_frozen"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "ground": self.ground,
            "sport": self.sport,
            "date": self.date.isoformat(),
            "slot": self.slot,
            "is_frozen": self.is_frozen,
            "frozen_by": self.frozen_by,
            "frozen_at": self.frozen_at.isoformat() if self.frozen_at else None,
        }
