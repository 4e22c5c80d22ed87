"""
Per-ground slot availability.

Every sport sharing a ground sees the same grid: a slot held by any booking
or frozen for any sport on that ground is unavailable to all of them.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Optional

from sqlalchemy import and_, or_

from models import db
from models.booking import Booking, BookingSlot
from models.enums import Ground, SLOT_HOLDING_STATUSES
from models.frozen_slot import FrozenSlot
from utils.slots import DAILY_SLOTS, slot_start

logger = logging.getLogger(__name__)


@dataclass
class SlotAvailability:
    slot: str
    available: bool
    blocked_by_booking: bool
    blocked_by_freeze: bool
    booked_sport: Optional[str] = None
    frozen_sport: Optional[str] = None

    def to_dict(self):
        return asdict(self)


def booked_slots(ground: Ground, day: date, lock: bool = False) -> dict:
    """slot label -> sport for every slot a confirmed or completed booking holds."""
    q = (
        db.session.query(BookingSlot.slot, BookingSlot.sport)
        .join(Booking, BookingSlot.booking_id == Booking.id)
        .filter(
            BookingSlot.ground == ground.value,
            BookingSlot.date == day,
            Booking.status.in_(SLOT_HOLDING_STATUSES),
        )
    )
    if lock:
        q = q.with_for_update()
    return {slot: sport for slot, sport in q.all()}


def frozen_slots(ground: Ground, day: date) -> dict:
    """slot label -> sport for every frozen slot on the ground, any sport."""
    rows = (
        db.session.query(FrozenSlot.slot, FrozenSlot.sport)
        .filter(
            FrozenSlot.ground == ground.value,
            FrozenSlot.date == day,
            FrozenSlot.is_frozen.is_(True),
        )
        .all()
    )
    return {slot: sport for slot, sport in rows}


def get_ground_availability(ground: Ground, day: date):
    booked = booked_slots(ground, day)
    frozen = frozen_slots(ground, day)
    out = []
    for label in DAILY_SLOTS:
        is_booked = label in booked
        is_frozen = label in frozen
        out.append(SlotAvailability(
            slot=label,
            available=not is_booked and not is_frozen,
            blocked_by_booking=is_booked,
            blocked_by_freeze=is_frozen,
            booked_sport=booked.get(label),
            frozen_sport=frozen.get(label),
        ))
    return out


def available_slots(ground: Ground, day: date):
    return [s.slot for s in get_ground_availability(ground, day) if s.available]


def find_unavailable(ground: Ground, day: date, slots, lock: bool = False):
    """
    Return (booked, frozen) for the requested labels: each a dict of
    slot -> sport that blocked it. Reads through the current session so a
    writer sees its own transaction.
    """
    booked = booked_slots(ground, day, lock=lock)
    frozen = frozen_slots(ground, day)
    wanted = list(slots)
    return (
        {s: booked[s] for s in wanted if s in booked},
        {s: frozen[s] for s in wanted if s in frozen},
    )


def cleanup_expired_freezes(now: datetime) -> int:
    """
    Drop freezes for past dates and for today's slots that have already started.
    `now` is naive local business time.
    """
    today = now.date()
    past_today = [label for label in DAILY_SLOTS if slot_start(today, label) <= now]

    q = FrozenSlot.query.filter(
        FrozenSlot.is_frozen.is_(True),
        or_(
            FrozenSlot.date < today,
            and_(FrozenSlot.date == today, FrozenSlot.slot.in_(past_today)),
        ),
    )
    deleted = q.delete(synchronize_session=False)
    db.session.commit()
    if deleted:
        logger.info("Removed %d expired frozen slots", deleted)
    return deleted
