from datetime import datetime
from models.db import db


class Coupon(db.Model):
    __tablename__ = "coupons"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)

    discount_type = db.Column(db.String(10), nullable=False)       # flat / percent
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)

    # [{"date": "YYYY-MM-DD", "slot": "06:00-07:00"}], empty means every slot
    applicable_slots = db.Column(db.JSON, nullable=False, default=list)
    # empty means every sport / every user
    sports = db.Column(db.JSON, nullable=False, default=list)
    assigned_users = db.Column(db.JSON, nullable=False, default=list)
    booking_type = db.Column(db.String(10), nullable=False, default="both")

    min_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    expiry_date = db.Column(db.DateTime, nullable=False)

    usage_limit = db.Column(db.Integer, nullable=False, default=0)     # 0 = unlimited
    used_count = db.Column(db.Integer, nullable=False, default=0)
    per_user_limit = db.Column(db.Integer, nullable=False, default=1)  # 0 = unlimited

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    show_on_home_page = db.Column(db.Boolean, default=False, nullable=False)
    offer_title = db.Column(db.String(100), nullable=False, default="")

    created_by = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index("ix_coupons_active_expiry", "is_active", "expiry_date"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": float(self.discount_value),
            "applicable_slots": self.applicable_slots or [],
            "sports": self.sports or [],
            "assigned_users": self.assigned_users or [],
            "booking_type": self.booking_type,
            "min_amount": float(self.min_amount or 0),
            "expiry_date": self.expiry_date.isoformat(),
            "usage_limit": self.usage_limit,
            "used_count": self.used_count,
            "per_user_limit": self.per_user_limit,
            "is_active": self.is_active,
            "show_on_home_page": self.show_on_home_page,
            "offer_title": self.offer_title,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_public_dict(self):
        return {
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": float(self.discount_value),
            "offer_title": self.offer_title,
        }


class CouponUsage(db.Model):
    __tablename__ = "coupon_usages"

    id = db.Column(db.Integer, primary_key=True)
    coupon_code = db.Column(db.String(20), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    mobile = db.Column(db.String(10), nullable=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=True)
    used_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index("ix_coupon_usages_code_email", "coupon_code", "email"),
        # A booking redeems a coupon once
        db.UniqueConstraint("booking_id", name="uq_coupon_usage_booking"),
    )
