"""
Project-wide fixtures: users, membership statuses and Celery behaviour.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.utils import timezone

from accounts.models import ClubUser
from membership.models import MembershipStatus


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test so throttling counters start from zero."""
    cache.clear()


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def admission_policy(settings: t.Any) -> None:
    """Pin the admission policy so tests don't depend on the environment."""
    settings.CLUB_TIMEZONE = "America/Los_Angeles"
    settings.DEFAULT_REGISTRATION_OPEN_HOUR = 8
    settings.AUTO_PROMOTE_ON_CANCEL = True
    settings.AUDIT_FAIL_CLOSED = False
    settings.ADMISSION_WRITE_RETRIES = 1


class ClubUserFactory:
    """Factory for creating ClubUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> ClubUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        preferred_name = kwargs.pop("preferred_name", f"{first_name} {last_name}")
        return ClubUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            preferred_name=preferred_name,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> ClubUser:
        return self.create_user(**kwargs)


@pytest.fixture
def club_user_factory() -> ClubUserFactory:
    return ClubUserFactory()


@pytest.fixture
def superuser(club_user_factory: ClubUserFactory) -> ClubUser:
    """A superuser."""
    return club_user_factory(is_superuser=True, is_staff=True)


@pytest.fixture
def active_status(db: None) -> MembershipStatus:
    return MembershipStatus.objects.create(code="active", label="Active", is_active=True)


@pytest.fixture
def newcomer_status(db: None) -> MembershipStatus:
    return MembershipStatus.objects.create(code="newcomer", label="Newcomer", is_active=True)


@pytest.fixture
def extended_status(db: None) -> MembershipStatus:
    return MembershipStatus.objects.create(code="extended", label="Extended", is_active=True)


@pytest.fixture
def lapsed_status(db: None) -> MembershipStatus:
    return MembershipStatus.objects.create(code="lapsed", label="Lapsed", is_active=False)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
