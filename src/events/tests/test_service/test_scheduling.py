"""Tests for the default newsletter publication schedule."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest
from freezegun import freeze_time

from events.service.scheduling import (
    compute_default_schedule,
    following_tuesday,
    format_registration_opens_message,
    next_sunday,
    week_range,
)

LA = ZoneInfo("America/Los_Angeles")


class TestNextSunday:
    @pytest.mark.parametrize(
        "local_now,expected",
        [
            (datetime(2026, 10, 19, 10, 0, tzinfo=LA), date(2026, 10, 25)),
            (datetime(2026, 10, 24, 23, 30, tzinfo=LA), date(2026, 10, 25)),
            (datetime(2026, 10, 25, 9, 0, tzinfo=LA), date(2026, 11, 1)),
        ],
        ids=["monday", "late-saturday", "sunday-rolls-forward"],
    )
    def test_next_sunday(self, local_now: datetime, expected: date) -> None:
        assert next_sunday(local_now) == expected

    def test_uses_club_date_not_utc_date(self) -> None:
        """Saturday evening in the club is already Sunday in UTC."""
        utc_now = datetime(2026, 10, 25, 6, 30, tzinfo=UTC)

        assert next_sunday(utc_now) == date(2026, 10, 25)


class TestComputeDefaultSchedule:
    def test_monday_schedule(self) -> None:
        schedule = compute_default_schedule(True, now=datetime(2026, 10, 19, 10, 0, tzinfo=LA))

        assert schedule.publish_at == datetime(2026, 10, 25, 0, 0, tzinfo=LA)
        assert schedule.registration_opens_at == datetime(2026, 10, 27, 8, 0, tzinfo=LA)
        assert schedule.explanation == (
            "Publishes Sun, Oct 25 with the weekly newsletter; "
            "registration opens Tue, Oct 27 at 8:00 AM (America/Los_Angeles)."
        )

    def test_tuesday_open_crosses_daylight_saving_change(self) -> None:
        schedule = compute_default_schedule(True, now=datetime(2026, 10, 25, 9, 0, tzinfo=LA))

        assert schedule.registration_opens_at is not None
        assert schedule.registration_opens_at.astimezone(UTC) == datetime(2026, 11, 3, 16, 0, tzinfo=UTC)

    def test_without_registration_publishes_now(self) -> None:
        now = datetime(2026, 10, 21, 15, 0, tzinfo=UTC)

        schedule = compute_default_schedule(False, now=now)

        assert schedule.publish_at == now
        assert schedule.registration_opens_at is None
        assert schedule.explanation == "Publishes immediately; no registration required."

    @freeze_time("2026-10-19T17:00:00Z")
    def test_defaults_to_current_time(self) -> None:
        schedule = compute_default_schedule(True)

        assert schedule.publish_at.date() == date(2026, 10, 25)

    def test_open_hour_is_configurable(self, settings: object) -> None:
        settings.DEFAULT_REGISTRATION_OPEN_HOUR = 10  # type: ignore[attr-defined]

        assert following_tuesday(date(2026, 10, 25)) == datetime(2026, 10, 27, 10, 0, tzinfo=LA)


class TestRegistrationOpensMessage:
    def test_formats_in_club_time(self) -> None:
        opens_at = datetime(2026, 10, 27, 15, 0, tzinfo=UTC)

        assert format_registration_opens_message(True, opens_at) == "Registration opens Tue, Oct 27 at 8:00 AM"

    def test_afternoon(self) -> None:
        opens_at = datetime(2026, 10, 27, 13, 5, tzinfo=LA)

        assert format_registration_opens_message(True, opens_at) == "Registration opens Tue, Oct 27 at 1:05 PM"

    @pytest.mark.parametrize(
        "requires_registration,opens_at",
        [(False, datetime(2026, 10, 27, 15, 0, tzinfo=UTC)), (True, None)],
    )
    def test_nothing_to_announce(self, requires_registration: bool, opens_at: datetime | None) -> None:
        assert format_registration_opens_message(requires_registration, opens_at) is None


@pytest.mark.parametrize(
    "day,expected",
    [
        (date(2026, 10, 21), (date(2026, 10, 18), date(2026, 10, 24))),
        (date(2026, 10, 18), (date(2026, 10, 18), date(2026, 10, 24))),
        (date(2026, 10, 24), (date(2026, 10, 18), date(2026, 10, 24))),
    ],
)
def test_week_range_runs_sunday_to_saturday(day: date, expected: tuple[date, date]) -> None:
    assert week_range(day) == expected
