"""
Price quotes for turf bookings.

Match bookings get a day-of-week discount (Mon-Thu 30%, Fri-Sun 10% by
default) and are split into a fixed online advance plus a remainder paid at
the turf. Practice bookings are never discounted and are paid in full online.
"""
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from cachetools import TTLCache
from flask import current_app

from models.enums import Ground
from utils.errors import ValidationError

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

CENTS = Decimal("0.01")

_day_cache = TTLCache(maxsize=100, ttl=60 * 60)


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def configure_day_cache(ttl_seconds: int, max_entries: int):
    global _day_cache
    _day_cache = TTLCache(maxsize=max_entries, ttl=ttl_seconds)


def get_day_of_week(day: date) -> int:
    """0 = Monday .. 6 = Sunday, memoized per ISO date."""
    key = day.isoformat()
    weekday = _day_cache.get(key)
    if weekday is None:
        weekday = day.weekday()
        _day_cache[key] = weekday
    return weekday


def get_day_name(day: date) -> str:
    return DAY_NAMES[get_day_of_week(day)]


def get_discount_percentage(ground: Ground, day: date) -> int:
    if ground is Ground.PRACTICE:
        return 0
    if get_day_of_week(day) <= 3:
        return current_app.config.get("WEEKDAY_DISCOUNT_PERCENT", 30)
    return current_app.config.get("WEEKEND_DISCOUNT_PERCENT", 10)


@dataclass(frozen=True)
class PriceQuote:
    ground: str
    date: str
    day_name: str
    slot_count: int
    rate: Decimal
    base_price: Decimal
    discount_percentage: int
    discount_amount: Decimal
    final_price: Decimal
    advance_payment: Decimal
    remaining_payment: Decimal

    def to_dict(self):
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = float(value)
        return data


def base_rate(ground: Ground) -> Decimal:
    return money(current_app.config["BASE_PRICES"][ground.value])


def quote(ground: Ground, day: date, slot_count: int) -> PriceQuote:
    if not isinstance(slot_count, int) or slot_count < 1:
        raise ValidationError("At least one slot is required for a price quote", field="slots")

    rate = base_rate(ground)
    base_price = money(rate * slot_count)
    pct = get_discount_percentage(ground, day)
    discount_amount = money(base_price * pct / 100)
    final_price = base_price - discount_amount

    if ground is Ground.MATCH:
        advance = min(money(current_app.config.get("ADVANCE_PAYMENT", 200)), final_price)
    else:
        advance = final_price

    return PriceQuote(
        ground=ground.value,
        date=day.isoformat(),
        day_name=get_day_name(day),
        slot_count=slot_count,
        rate=rate,
        base_price=base_price,
        discount_percentage=pct,
        discount_amount=discount_amount,
        final_price=final_price,
        advance_payment=advance,
        remaining_payment=final_price - advance,
    )


def split_payment(ground: Ground, amount: Decimal):
    """Return (advance, remaining) for an amount after coupons."""
    amount = money(amount)
    if ground is Ground.MATCH:
        advance = min(money(current_app.config.get("ADVANCE_PAYMENT", 200)), amount)
        return advance, amount - advance
    return amount, money(0)


def discount_info(ground: Ground, day: date) -> str:
    pct = get_discount_percentage(ground, day)
    name = get_day_name(day)
    if pct == 0:
        return f"Regular pricing on {name}s"
    if get_day_of_week(day) <= 3:
        return f"{pct}% discount on {name}s (Mon-Thu)"
    return f"{pct}% discount on {name}s (Fri-Sun)"
