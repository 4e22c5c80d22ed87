import re
from datetime import date, datetime, time, timedelta

# Fixed daily schedule: 24 one-hour slots, "00:00-01:00" .. "23:00-00:00"
DAILY_SLOTS = tuple(f"{h:02d}:00-{(h + 1) % 24:02d}:00" for h in range(24))

_SLOT_RE = re.compile(r"^(\d{2}):(\d{2})-(\d{2}):(\d{2})$")


def is_valid_slot(label: str) -> bool:
    return label in DAILY_SLOTS


def split_slots(value):
    """
    Accept a list of labels or a comma separated string; return clean labels in order.
    Raises ValueError for any other type.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        raise ValueError("slots must be a list or a comma separated string")
    out = []
    for p in parts:
        if not isinstance(p, str):
            continue
        p = p.strip()
        if p and p not in out:
            out.append(p)
    return out


def sort_slots(labels):
    order = {s: i for i, s in enumerate(DAILY_SLOTS)}
    return sorted(labels, key=lambda s: order.get(s, len(order)))


def slot_start(day: date, label: str) -> datetime:
    m = _SLOT_RE.match(label)
    if not m:
        raise ValueError(f"Invalid slot label: {label}")
    return datetime.combine(day, time(int(m.group(1)), int(m.group(2))))


def slot_end(day: date, label: str) -> datetime:
    m = _SLOT_RE.match(label)
    if not m:
        raise ValueError(f"Invalid slot label: {label}")
    end = datetime.combine(day, time(int(m.group(3)), int(m.group(4))))
    # "23:00-00:00" ends at midnight of the next day
    if end <= slot_start(day, label):
        end += timedelta(days=1)
    return end


def latest_end(day: date, labels) -> datetime:
    return max(slot_end(day, s) for s in labels)
