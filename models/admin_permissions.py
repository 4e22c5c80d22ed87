from datetime import datetime
from models.db import db

PERMISSION_KEYS = (
    # coupons
    "can_create_coupon",
    "can_edit_coupon",
    "can_delete_coupon",
    "can_view_coupons",
    # bookings
    "can_create_booking",
    "can_edit_booking",
    "can_delete_booking",
    "can_view_bookings",
    # slots
    "can_freeze_slots",
    "can_unfreeze_slots",
    "can_view_slots",
    # dashboard
    "can_view_dashboard",
    "can_view_stats",
    # newsletter
    "can_view_newsletter",
)


class AdminPermissions(db.Model):
    """Single row of capability flags consulted for every ADMIN action."""
    __tablename__ = "admin_permissions"

    id = db.Column(db.Integer, primary_key=True)

    can_create_coupon = db.Column(db.Boolean, default=True, nullable=False)
    can_edit_coupon = db.Column(db.Boolean, default=True, nullable=False)
    can_delete_coupon = db.Column(db.Boolean, default=True, nullable=False)
    can_view_coupons = db.Column(db.Boolean, default=True, nullable=False)

    can_create_booking = db.Column(db.Boolean, default=True, nullable=False)
    can_edit_booking = db.Column(db.Boolean, default=True, nullable=False)
    can_delete_booking = db.Column(db.Boolean, default=True, nullable=False)
    can_view_bookings = db.Column(db.Boolean, default=True, nullable=False)

    can_freeze_slots = db.Column(db.Boolean, default=True, nullable=False)
    can_unfreeze_slots = db.Column(db.Boolean, default=True, nullable=False)
    can_view_slots = db.Column(db.Boolean, default=True, nullable=False)

    can_view_dashboard = db.Column(db.Boolean, default=True, nullable=False)
    can_view_stats = db.Column(db.Boolean, default=True, nullable=False)

    can_view_newsletter = db.Column(db.Boolean, default=True, nullable=False)

    updated_by = db.Column(db.String(120), nullable=False, default="system")
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @classmethod
    def load(cls):
        return cls.query.order_by(cls.id.asc()).first()

    @classmethod
    def get_or_create_default(cls) -> "AdminPermissions":
        row = cls.load()
        if row is None:
            row = cls(**{key: True for key in PERMISSION_KEYS})
            db.session.add(row)
            db.session.commit()
        return row

    def to_dict(self):
        data = {key: bool(getattr(self, key)) for key in PERMISSION_KEYS}
        data["updated_by"] = self.updated_by
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
