import calendar
import re
from datetime import datetime, timedelta, timezone

from flask import current_app

from ashenda.services.errors import StoreError

FIRST_ROW = "first_row"
KEYED = "keyed"
POLICIES = (FIRST_ROW, KEYED)

# Default horizon when the store has no target: three months out, end of day.
DEFAULT_FALLBACK = "+3m"

_RELATIVE = re.compile(r"^\+(\d+)([md])$")


def utcnow():
    return datetime.now(timezone.utc)


def parse_timestamp(value):
    if not value:
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def add_months(moment, months):
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def fallback_target(fallback=DEFAULT_FALLBACK, now=None):
    now = now or utcnow()
    match = _RELATIVE.match((fallback or "").strip())
    if match:
        amount, unit = int(match.group(1)), match.group(2)
        if unit == "m":
            target = add_months(now, amount)
        else:
            target = now + timedelta(days=amount)
        return target.replace(hour=23, minute=59, second=59, microsecond=999000)

    target = parse_timestamp(fallback)
    if target is None:
        raise ValueError(f"Unsupported countdown fallback: {fallback!r}")
    return target


def resolve_countdown_target(
    store, policy=FIRST_ROW, key="countdown_target", fallback=DEFAULT_FALLBACK, now=None
):
    if policy not in POLICIES:
        raise ValueError(f"Unknown countdown policy: {policy!r}")

    value = None
    try:
        value = store.select_setting(key if policy == KEYED else None)
    except StoreError as exc:
        current_app.logger.warning("Countdown target unavailable: %s", exc)

    target = parse_timestamp(value)
    if target is None:
        if value:
            current_app.logger.warning("Ignoring malformed countdown target %r", value)
        target = fallback_target(fallback, now)
        current_app.logger.info("Using fallback countdown target %s", target.isoformat())
    return target


def countdown_parts(target, now=None):
    now = now or utcnow()
    remaining = target - now
    if remaining <= timedelta(0):
        return {
            "days": "00",
            "hours": "00",
            "minutes": "00",
            "seconds": "00",
            "finished": True,
        }

    total_seconds = int(remaining.total_seconds())
    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    return {
        "days": f"{days:02d}",
        "hours": f"{hours:02d}",
        "minutes": f"{minutes:02d}",
        "seconds": f"{seconds:02d}",
        "finished": False,
    }
