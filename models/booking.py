from datetime import datetime
from models.db import db
from models.enums import BookingStatus, PaymentStatus, BookingSource
from utils.errors import ValidationError

BOOKING_REF_PREFIX = "CWPA"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    ground = db.Column(db.String(20), nullable=False)     # match / practice
    sport = db.Column(db.String(20), nullable=False)
    date = db.Column(db.Date, nullable=False)
    # comma separated slot labels, e.g. "06:00-07:00, 07:00-08:00"
    slots = db.Column(db.String(400), nullable=False)

    name = db.Column(db.String(100), nullable=False)
    mobile = db.Column(db.String(10), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    base_price = db.Column(db.Numeric(10, 2), nullable=False)
    discount_percentage = db.Column(db.Integer, nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    coupon_code = db.Column(db.String(20), nullable=True)
    coupon_discount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    final_price = db.Column(db.Numeric(10, 2), nullable=False)
    advance_payment = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    remaining_payment = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    source = db.Column(db.String(20), nullable=False, default=BookingSource.ONLINE.value)
    status = db.Column(db.String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    payment_status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)

    stripe_session_id = db.Column(db.String(255), nullable=True, unique=True, index=True)
    stripe_payment_intent_id = db.Column(db.String(255), nullable=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancelled_by = db.Column(db.String(120), nullable=True)
    cancel_reason = db.Column(db.String(500), nullable=True)

    claims = db.relationship(
        "BookingSlot",
        back_populates="booking",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_bookings_ground_date_status", "ground", "date", "status"),
    )

    @property
    def slot_list(self):
        return [s.strip() for s in (self.slots or "").split(",") if s.strip()]

    @property
    def booking_ref(self) -> str:
        return f"{BOOKING_REF_PREFIX}{self.id:04d}" if self.id else None

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    def transition_to(self, target: BookingStatus):
        current = self.status_enum
        if not current.can_transition_to(target):
            raise ValidationError(
                f"Booking cannot move from {current.value} to {target.value}",
                field="status",
            )
        self.status = target.value

    def to_dict(self):
        return {
            "id": self.id,
            "booking_ref": self.booking_ref,
            "ground": self.ground,
            "sport": self.sport,
            "date": self.date.isoformat(),
            "slots": self.slot_list,
            "name": self.name,
            "mobile": self.mobile,
            "email": self.email,
            "base_price": float(self.base_price),
            "discount_percentage": self.discount_percentage,
            "discount_amount": float(self.discount_amount or 0),
            "coupon_code": self.coupon_code,
            "coupon_discount": float(self.coupon_discount or 0),
            "final_price": float(self.final_price),
            "advance_payment": float(self.advance_payment or 0),
            "remaining_payment": float(self.remaining_payment or 0),
            "source": self.source,
            "status": self.status,
            "payment_status": self.payment_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancelled_by": self.cancelled_by,
            "cancel_reason": self.cancel_reason,
        }


class BookingSlot(db.Model):
    """One row per slot a live booking holds on a ground."""
    __tablename__ = "booking_slots"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)

    ground = db.Column(db.String(20), nullable=False)
    date = db.Column(db.Date, nullable=False)
    slot = db.Column(db.String(11), nullable=False)
    sport = db.Column(db.String(20), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    booking = db.relationship("Booking", back_populates="claims")

    __table_args__ = (
        # Hard business rule: one shared ground, one booking per slot regardless of sport
        db.UniqueConstraint("ground", "date", "slot", name="uq_booking_slot_ground_date_slot"),
    )
