"""Parsing of event dates stored as ``"2025年9月6日20:00"`` strings.

Event dates carry no timezone. They are read as wall-clock time in the
deployment timezone (``EVENT_TIMEZONE``, Tokyo by default).
"""
import logging
import re
from datetime import datetime

import pytz

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Tokyo"
EVENT_DATE_PATTERN = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日(\d{1,2}):(\d{2})")


class EventDateError(ValueError):
    pass


def get_timezone(tz=None):
    if tz is None:
        return pytz.timezone(DEFAULT_TIMEZONE)
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _now(tz):
    return datetime.now(pytz.UTC).astimezone(tz)


def parse_event_date(date_str, tz=None, strict=True, now=None):
    """Parse an event date into an aware datetime.

    With ``strict=False`` a parse failure is logged and ``now`` (or the
    current time) is returned instead of raising.
    """
    tz = get_timezone(tz)

    try:
        if not date_str or not isinstance(date_str, str):
            raise EventDateError("Date string is empty")

        match = EVENT_DATE_PATTERN.search(date_str)
        if not match:
            raise EventDateError(f"Invalid date format: {date_str}")

        year, month, day, hour, minute = (int(part) for part in match.groups())
        try:
            naive = datetime(year, month, day, hour, minute)
        except ValueError as e:
            raise EventDateError(f"Invalid date value: {date_str} ({e})") from e

        return tz.localize(naive)
    except EventDateError as e:
        if strict:
            raise
        logger.warning(f"Date parsing error: {e}")
        return now if now is not None else _now(tz)


def is_not_yet_started(date_str, now=None, tz=None):
    """True if the event starts after ``now``.

    An unparseable date also counts as not started, so registration and
    cancellation stay available for events with malformed dates.
    """
    tz = get_timezone(tz)
    now = now if now is not None else _now(tz)
    try:
        return parse_event_date(date_str, tz=tz) > now
    except EventDateError as e:
        logger.warning(f"Event start check error: {e}")
        return True


def format_event_date(dt):
    return f"{dt.year}年{dt.month}月{dt.day}日{dt.hour}:{dt.minute:02d}"
