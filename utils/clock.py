"""Business-timezone helpers. Stored datetimes stay naive UTC; slot maths uses local time."""
from datetime import datetime

import pytz
from flask import current_app


def _local_tz():
    return pytz.timezone(current_app.config.get("TIMEZONE", "Asia/Kolkata"))


def local_now() -> datetime:
    """Current naive datetime in the business timezone."""
    return datetime.now(pytz.utc).astimezone(_local_tz()).replace(tzinfo=None)


def local_today():
    return local_now().date()


def to_utc_naive(local_dt: datetime) -> datetime:
    """Naive business-local datetime -> naive UTC, for comparing with stored timestamps."""
    return _local_tz().localize(local_dt).astimezone(pytz.utc).replace(tzinfo=None)
