from enum import Enum


class Ground(str, Enum):
    MATCH = "match"          # main turf
    PRACTICE = "practice"    # practice turf


class Sport(str, Enum):
    CRICKET = "Cricket"
    FOOTBALL = "Football"
    BADMINTON = "Badminton"


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, target: "BookingStatus") -> bool:
        return target in BOOKING_TRANSITIONS.get(self, frozenset())


# CONFIRMED is the only non-terminal state
BOOKING_TRANSITIONS = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses whose slots show as taken on the availability grid
SLOT_HOLDING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    NOT_REQUIRED = "NOT_REQUIRED"


class BookingSource(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class DiscountType(str, Enum):
    FLAT = "flat"
    PERCENT = "percent"


class CouponBookingType(str, Enum):
    MATCH = "match"
    PRACTICE = "practice"
    BOTH = "both"


class ReviewStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"


def parse_enum(enum_cls, value):
    """Return the member of enum_cls for value, or None."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return None
