from datetime import datetime, time, timezone, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

try:
    BRAZIL_TZ = ZoneInfo("America/Sao_Paulo")
except ZoneInfoNotFoundError:
    # tzdata may be missing on slim images
    BRAZIL_TZ = timezone(timedelta(hours=-3))


def agora() -> datetime:
    """Current instant, timezone-aware in America/Sao_Paulo."""
    return datetime.now(BRAZIL_TZ)


def make_aware_in_brazil(dt: datetime) -> datetime:
    # naive values are read as local wall-clock time
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=BRAZIL_TZ)
    return dt.astimezone(BRAZIL_TZ)


def as_utc_naive(dt: datetime) -> datetime:
    """Normalize to naive UTC, the form trip timestamps are stored in.

    Naive input is assumed to already be UTC and is returned unchanged.
    """
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def local_to_utc_naive(dt: datetime) -> datetime:
    """Client-supplied timestamp to storage form.

    Values without an offset are Sao Paulo wall-clock time, the same reading
    the day filters use.
    """
    return as_utc_naive(make_aware_in_brazil(dt))


def local_day_range_to_utc(date_str: str):
    """Bounds of a Sao Paulo calendar day as naive UTC datetimes.

    '2026-03-10' covers 03:00 UTC that day up to 02:59:59.999999 UTC the
    next. A full ISO datetime is taken as a single local instant, so both
    bounds are equal. Unparseable input gives ``(None, None)``.
    """
    if not date_str:
        return None, None
    try:
        parsed = datetime.fromisoformat(date_str)
    except ValueError:
        return None, None
    if len(date_str) == 10:
        bounds = (datetime.combine(parsed.date(), time.min), datetime.combine(parsed.date(), time.max))
    else:
        bounds = (parsed, parsed)
    return tuple(local_to_utc_naive(b) for b in bounds)
