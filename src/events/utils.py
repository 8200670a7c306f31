import datetime
from zoneinfo import ZoneInfo

from django.conf import settings


def club_timezone() -> ZoneInfo:
    """The club's fixed organizational timezone."""
    return ZoneInfo(settings.CLUB_TIMEZONE)


def local_date(moment: datetime.datetime) -> datetime.date:
    """The calendar date of ``moment`` in the club's timezone."""
    return moment.astimezone(club_timezone()).date()
