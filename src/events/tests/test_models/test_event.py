from datetime import datetime, timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from events.enums import EventStatus, OverrideOutcome
from events.models import EligibilityOverride, Event, TicketTier
from membership.models import Member

pytestmark = pytest.mark.django_db


def test_event_cannot_end_before_it_starts() -> None:
    start = timezone.now() + timedelta(days=3)

    with pytest.raises(ValidationError) as exc_info:
        Event.objects.create(title="Backwards", slug="backwards", start_time=start, end_time=start - timedelta(hours=1))

    assert "end_time" in exc_info.value.message_dict


def test_registration_cannot_close_before_it_opens() -> None:
    start = timezone.now() + timedelta(days=3)

    with pytest.raises(ValidationError) as exc_info:
        Event.objects.create(
            title="Backwards",
            slug="backwards",
            start_time=start,
            registration_opens_at=start - timedelta(days=1),
            registration_deadline=start - timedelta(days=2),
        )

    assert "registration_deadline" in exc_info.value.message_dict


def test_visible_events() -> None:
    now = timezone.now()
    start = now + timedelta(days=10)
    published = Event.objects.create(title="A", slug="a", status=EventStatus.PUBLISHED, start_time=start)
    due = Event.objects.create(
        title="B", slug="b", status=EventStatus.APPROVED, publish_at=now - timedelta(hours=1), start_time=start
    )
    Event.objects.create(
        title="C", slug="c", status=EventStatus.APPROVED, publish_at=now + timedelta(hours=1), start_time=start
    )
    Event.objects.create(title="D", slug="d", status=EventStatus.DRAFT, start_time=start)

    assert set(Event.objects.visible(now)) == {published, due}


def test_tier_statuses_must_be_a_list_of_codes(open_event: Event) -> None:
    with pytest.raises(ValidationError):
        TicketTier.objects.create(
            event=open_event, code="bad", name="Bad", quantity=1, allowed_member_statuses={"newcomer": True}
        )


def test_override_tier_must_belong_to_event(
    member: Member, standard_tier: TicketTier, next_week: datetime
) -> None:
    other = Event.objects.create(title="Other", slug="other", start_time=next_week)

    with pytest.raises(ValidationError) as exc_info:
        EligibilityOverride.objects.create(
            member=member, event=other, tier=standard_tier, outcome=OverrideOutcome.ALLOW
        )

    assert "tier" in exc_info.value.message_dict
