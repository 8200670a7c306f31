"""Default publication and registration schedule for newly authored events.

The club announces events in its Sunday newsletter and opens registration the
following Tuesday morning. Every computation here happens in the configured club
timezone, never in process-local time.
"""

import datetime

from django.conf import settings
from django.utils import timezone
from pydantic import BaseModel

from events.utils import club_timezone


class DefaultSchedule(BaseModel):
    publish_at: datetime.datetime
    registration_opens_at: datetime.datetime | None
    explanation: str


def next_sunday(now: datetime.datetime) -> datetime.date:
    """The next Sunday strictly after ``now``'s local date. A Sunday rolls to the following one."""
    today = now.astimezone(club_timezone()).date()
    days_ahead = (6 - today.weekday()) % 7 or 7
    return today + datetime.timedelta(days=days_ahead)


def following_tuesday(sunday: datetime.date) -> datetime.datetime:
    """Registration-open time on the Tuesday after ``sunday``."""
    tuesday = sunday + datetime.timedelta(days=2)
    return datetime.datetime.combine(
        tuesday, datetime.time(hour=settings.DEFAULT_REGISTRATION_OPEN_HOUR), tzinfo=club_timezone()
    )


def compute_default_schedule(requires_registration: bool, now: datetime.datetime | None = None) -> DefaultSchedule:
    """Suggest ``publish_at`` and ``registration_opens_at`` for a new event.

    Args:
        requires_registration: Whether the event takes registrations.
        now: The reference instant, defaults to the current time.

    Returns:
        The suggested schedule plus a human-readable explanation.
    """
    now = now or timezone.now()
    tz = club_timezone()

    if not requires_registration:
        return DefaultSchedule(
            publish_at=now.astimezone(tz),
            registration_opens_at=None,
            explanation="Publishes immediately; no registration required.",
        )

    sunday = next_sunday(now)
    publish_at = datetime.datetime.combine(sunday, datetime.time.min, tzinfo=tz)
    opens_at = following_tuesday(sunday)
    explanation = (
        f"Publishes {_format_day(publish_at)} with the weekly newsletter; "
        f"registration opens {_format_day(opens_at)} at {_format_clock(opens_at)} ({tz.key})."
    )
    return DefaultSchedule(publish_at=publish_at, registration_opens_at=opens_at, explanation=explanation)


def format_registration_opens_message(
    requires_registration: bool, registration_opens_at: datetime.datetime | None
) -> str | None:
    """Member-facing "Registration opens ..." line, or None when there is nothing to announce."""
    if not requires_registration or registration_opens_at is None:
        return None
    local = registration_opens_at.astimezone(club_timezone())
    return f"Registration opens {_format_day(local)} at {_format_clock(local)}"


def week_range(day: datetime.date) -> tuple[datetime.date, datetime.date]:
    """The Sunday-to-Saturday newsletter week containing ``day``."""
    start = day - datetime.timedelta(days=(day.weekday() + 1) % 7)
    return start, start + datetime.timedelta(days=6)


def _format_day(moment: datetime.datetime) -> str:
    return f"{moment:%a}, {moment:%b} {moment.day}"


def _format_clock(moment: datetime.datetime) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment:%M} {meridiem}"
