import typing as t
from datetime import date, datetime, timedelta

import pytest
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken

from accounts.models import ClubUser
from conftest import ClubUserFactory
from events.enums import EventStatus, TicketCategory
from events.models import Event, EventSponsorship, TicketTier
from membership.models import Committee, CommitteeMembership, Member, MembershipStatus

MemberFactory = t.Callable[..., Member]
TierFactory = t.Callable[..., TicketTier]


@pytest.fixture
def member_factory(club_user_factory: ClubUserFactory, active_status: MembershipStatus) -> MemberFactory:
    """Create a user with a member record. Defaults to an active membership."""

    def _create(status: MembershipStatus | None = None, **kwargs: t.Any) -> Member:
        user = kwargs.pop("user", None) or club_user_factory()
        return Member.objects.create(user=user, membership_status=status or active_status, **kwargs)

    return _create


@pytest.fixture
def member(member_factory: MemberFactory) -> Member:
    return member_factory()


@pytest.fixture
def member_client(member: Member) -> Client:
    """API client for an active member."""
    refresh = RefreshToken.for_user(member.user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def superuser_client(superuser: ClubUser) -> Client:
    """API client for a superuser."""
    refresh = RefreshToken.for_user(superuser)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def social_committee(db: None) -> Committee:
    return Committee.objects.create(name="Social", slug="social")


@pytest.fixture
def hiking_committee(db: None) -> Committee:
    return Committee.objects.create(name="Hiking", slug="hiking")


@pytest.fixture
def open_event(next_week: datetime) -> Event:
    """A published event whose registration window is open now."""
    return Event.objects.create(
        title="Spring Gala",
        slug="spring-gala",
        status=EventStatus.PUBLISHED,
        published_at=timezone.now() - timedelta(days=2),
        registration_opens_at=timezone.now() - timedelta(days=1),
        start_time=next_week,
        end_time=next_week + timedelta(hours=4),
    )


@pytest.fixture
def tier_factory(open_event: Event) -> TierFactory:
    def _create(**kwargs: t.Any) -> TicketTier:
        code = kwargs.pop("code", f"tier-{TicketTier.objects.count() + 1}")
        event = kwargs.pop("event", open_event)
        kwargs.setdefault("name", code.replace("-", " ").title())
        kwargs.setdefault("quantity", 10)
        return TicketTier.objects.create(event=event, code=code, **kwargs)

    return _create


@pytest.fixture
def standard_tier(tier_factory: TierFactory) -> TicketTier:
    return tier_factory(code="standard", name="Standard", quantity=2, price_cents=2500)


@pytest.fixture
def sponsor_tier(tier_factory: TierFactory, open_event: Event, social_committee: Committee) -> TicketTier:
    EventSponsorship.objects.create(event=open_event, committee=social_committee, is_primary=True)
    return tier_factory(code="sponsor", name="Sponsor", category=TicketCategory.SPONSOR_COMMITTEE, quantity=5)


@pytest.fixture
def working_tier(tier_factory: TierFactory) -> TicketTier:
    return tier_factory(code="working", name="Working", category=TicketCategory.WORKING_COMMITTEE, quantity=5)


def seat_on_committee(member: Member, committee: Committee, start: date, end: date | None = None) -> None:
    CommitteeMembership.objects.create(member=member, committee=committee, start_date=start, end_date=end)
