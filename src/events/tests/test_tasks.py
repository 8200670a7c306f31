import pytest
from django.core import mail

from events.enums import RegistrationStatus
from events.models import Event, Registration, TicketTier
from events.tasks import notify_registration_promoted
from membership.models import Member

pytestmark = pytest.mark.django_db


@pytest.fixture
def promoted(member: Member, open_event: Event, standard_tier: TicketTier) -> Registration:
    return Registration.objects.create(
        member=member, event=open_event, tier=standard_tier, status=RegistrationStatus.CONFIRMED
    )


def test_promotion_email(promoted: Registration) -> None:
    notify_registration_promoted(str(promoted.pk))

    assert len(mail.outbox) == 1
    assert mail.outbox[0].subject == "You're confirmed for Spring Gala"
    assert "your registration for Spring Gala is now confirmed" in mail.outbox[0].body


def test_member_without_email_is_skipped(promoted: Registration) -> None:
    user = promoted.member.user
    user.email = ""
    user.save()

    notify_registration_promoted(str(promoted.pk))

    assert mail.outbox == []
