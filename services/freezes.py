from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models import db
from models.enums import Ground
from models.frozen_slot import FrozenSlot
from services.availability import booked_slots
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.slots import is_valid_slot


def _check_slot(slot: str):
    if not is_valid_slot(slot):
        raise ValidationError(f"Invalid slot: {slot}", field="slot")


def freeze_slot(ground: Ground, sport: str, day: date, slot: str, frozen_by: str) -> FrozenSlot:
    """Block a slot for every sport on the ground. Refused while a booking holds it."""
    _check_slot(slot)

    holder = booked_slots(ground, day).get(slot)
    if holder:
        raise ConflictError(
            f"Cannot freeze: Slot {slot} already has a confirmed {holder} booking on {day.isoformat()}. "
            "Cancel the booking first.",
            slots=[slot],
            reason="booked",
        )

    row = FrozenSlot.query.filter_by(ground=ground.value, sport=sport, date=day, slot=slot).first()
    if row is not None and row.is_frozen:
        raise ValidationError("Slot is already frozen", field="slot")

    if row is None:
        row = FrozenSlot(ground=ground.value, sport=sport, date=day, slot=slot)
        db.session.add(row)
    row.is_frozen = True
    row.frozen_by = frozen_by
    row.frozen_at = datetime.utcnow()

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Slot is already frozen", field="slot")
    return row


def unfreeze_slot(ground: Ground, sport: str, day: date, slot: str) -> FrozenSlot:
    _check_slot(slot)
    row = FrozenSlot.query.filter_by(
        ground=ground.value, sport=sport, date=day, slot=slot, is_frozen=True
    ).first()
    if row is None:
        raise NotFoundError("Frozen slot not found")

    row.is_frozen = False
    row.frozen_by = None
    row.frozen_at = None
    db.session.commit()
    return row


def list_frozen(ground: Optional[Ground] = None, day: Optional[date] = None):
    q = FrozenSlot.query.filter(FrozenSlot.is_frozen.is_(True))
    if ground is not None:
        q = q.filter(FrozenSlot.ground == ground.value)
    if day is not None:
        q = q.filter(FrozenSlot.date == day)
    return q.order_by(FrozenSlot.date.asc(), FrozenSlot.slot.asc()).all()
