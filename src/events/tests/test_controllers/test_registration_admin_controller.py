"""Tests for the administrator registration endpoints."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from events.enums import OverrideOutcome, RegistrationStatus
from events.models import EligibilityOverride, Event, Registration, TicketTier
from events.service.admission import AdmissionController
from events.tests.conftest import MemberFactory
from membership.models import Member

pytestmark = pytest.mark.django_db

LA = ZoneInfo("America/Los_Angeles")


@pytest.fixture
def full_tier(member_factory: MemberFactory, open_event: Event, standard_tier: TicketTier) -> list[Registration]:
    """Two confirmed and two waitlisted registrations on the two-seat standard tier."""
    controller = AdmissionController()
    return [controller.register(open_event.pk, member_factory().pk, standard_tier.pk) for _ in range(4)]


class TestPermissions:
    def test_members_are_forbidden(self, member_client: Client, open_event: Event) -> None:
        response = member_client.get(reverse("api:event_capacity", kwargs={"event_id": open_event.pk}))

        assert response.status_code == 403

    def test_anonymous_is_unauthorized(self, client: Client, open_event: Event) -> None:
        response = client.get(reverse("api:event_capacity", kwargs={"event_id": open_event.pk}))

        assert response.status_code == 401


class TestPromoteEndpoint:
    def test_full_tier_is_unprocessable(self, superuser_client: Client, full_tier: list[Registration]) -> None:
        url = reverse("api:promote_registration", kwargs={"registration_id": full_tier[2].pk})

        response = superuser_client.post(url, data=orjson.dumps({}), content_type="application/json")

        assert response.status_code == 422
        assert response.json()["code"] == "CAPACITY_EXCEEDED"

    def test_override_capacity(self, superuser_client: Client, full_tier: list[Registration]) -> None:
        url = reverse("api:promote_registration", kwargs={"registration_id": full_tier[2].pk})
        payload = {"override_capacity": True, "notify": False, "notes": "  Speaker  "}

        response = superuser_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 200, response.content
        data = response.json()
        assert data["status"] == "CONFIRMED"
        assert data["previous_status"] == "WAITLISTED"
        assert data["spots_available"] == -1
        assert data["warning"] == "Ticket tier 'Standard' is over capacity by 1."
        assert data["remaining_waitlist"] == 1
        full_tier[2].refresh_from_db()
        assert full_tier[2].notes == "Speaker"

    def test_confirmed_registration_cannot_be_promoted(
        self, superuser_client: Client, full_tier: list[Registration]
    ) -> None:
        url = reverse("api:promote_registration", kwargs={"registration_id": full_tier[0].pk})

        response = superuser_client.post(
            url, data=orjson.dumps({"override_capacity": True}), content_type="application/json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NOT_WAITLISTED"

    def test_unknown_registration(self, superuser_client: Client, open_event: Event) -> None:
        url = reverse("api:promote_registration", kwargs={"registration_id": open_event.pk})

        response = superuser_client.post(url, data=orjson.dumps({}), content_type="application/json")

        assert response.status_code == 404


class TestWaitlistAndCapacity:
    def test_waitlist_in_promotion_order(
        self, superuser_client: Client, open_event: Event, full_tier: list[Registration]
    ) -> None:
        response = superuser_client.get(reverse("api:event_waitlist", kwargs={"event_id": open_event.pk}))

        assert response.status_code == 200
        entries = response.json()
        assert [e["registration_id"] for e in entries] == [str(full_tier[2].pk), str(full_tier[3].pk)]
        assert [e["waitlist_position"] for e in entries] == [1, 2]
        assert entries[0]["ticket_tier_name"] == "Standard"
        assert entries[0]["member_name"] == full_tier[2].member.user.get_display_name()

    def test_capacity_summary(
        self, superuser_client: Client, open_event: Event, full_tier: list[Registration]
    ) -> None:
        response = superuser_client.get(reverse("api:event_capacity", kwargs={"event_id": open_event.pk}))

        assert response.status_code == 200
        data = response.json()
        summary = data["summary"]
        assert summary["total_available"] == 2
        assert summary["total_sold"] == 2
        assert summary["total_remaining"] == 0
        assert summary["total_waitlisted"] == 2
        assert summary["capacity_status"] == "WAITLISTED"
        assert data["price_range"] == "$25"
        assert data["waitlist_timing"]["waitlist_started_at"] is not None

    def test_capacity_of_unknown_event(self, superuser_client: Client, member: Member) -> None:
        response = superuser_client.get(reverse("api:event_capacity", kwargs={"event_id": member.pk}))

        assert response.status_code == 404


class TestEligibilityOverrides:
    def test_upsert_replaces_existing_override(
        self, superuser_client: Client, member: Member, open_event: Event, standard_tier: TicketTier
    ) -> None:
        url = reverse("api:save_eligibility_override", kwargs={"event_id": open_event.pk})
        payload = {
            "member_id": str(member.pk),
            "ticket_tier_id": str(standard_tier.pk),
            "outcome": OverrideOutcome.DENY,
            "reason": "Unpaid dues",
        }
        superuser_client.put(url, data=orjson.dumps(payload), content_type="application/json")

        payload |= {"outcome": OverrideOutcome.ALLOW, "reason": "Dues settled"}
        response = superuser_client.put(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 200, response.content
        data = response.json()
        assert data["outcome"] == "ALLOW"
        assert data["ticket_tier_id"] == str(standard_tier.pk)
        override = EligibilityOverride.objects.get()
        assert override.reason == "Dues settled"

    def test_override_changes_registration_outcome(
        self,
        superuser_client: Client,
        member_client: Client,
        member: Member,
        open_event: Event,
        standard_tier: TicketTier,
    ) -> None:
        superuser_client.put(
            reverse("api:save_eligibility_override", kwargs={"event_id": open_event.pk}),
            data=orjson.dumps(
                {
                    "member_id": str(member.pk),
                    "ticket_tier_id": str(standard_tier.pk),
                    "outcome": OverrideOutcome.DENY,
                    "reason": "Banned for this event",
                }
            ),
            content_type="application/json",
        )

        response = member_client.post(
            reverse("api:register_for_event", kwargs={"event_id": open_event.pk}),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json()["reason_code"] == "OVERRIDE_DENIED"

    def test_reason_is_required(
        self, superuser_client: Client, member: Member, open_event: Event, standard_tier: TicketTier
    ) -> None:
        url = reverse("api:save_eligibility_override", kwargs={"event_id": open_event.pk})
        payload = {
            "member_id": str(member.pk),
            "ticket_tier_id": str(standard_tier.pk),
            "outcome": OverrideOutcome.ALLOW,
            "reason": "   ",
        }

        response = superuser_client.put(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 422
        assert not EligibilityOverride.objects.exists()

    def test_delete_override(
        self, superuser_client: Client, member: Member, open_event: Event, standard_tier: TicketTier
    ) -> None:
        override = EligibilityOverride.objects.create(
            member=member, event=open_event, tier=standard_tier, outcome=OverrideOutcome.DENY
        )

        response = superuser_client.delete(
            reverse("api:delete_eligibility_override", kwargs={"override_id": override.pk})
        )

        assert response.status_code == 204
        assert not EligibilityOverride.objects.exists()


class TestDefaultSchedule:
    def test_suggests_newsletter_schedule(self, superuser_client: Client) -> None:
        response = superuser_client.get(reverse("api:default_schedule"))

        assert response.status_code == 200
        data = response.json()
        publish_at = datetime.fromisoformat(data["publish_at"]).astimezone(LA)
        opens_at = datetime.fromisoformat(data["registration_opens_at"]).astimezone(LA)
        assert (publish_at.weekday(), publish_at.hour) == (6, 0)
        assert (opens_at.weekday(), opens_at.hour) == (1, 8)
        assert opens_at.date() - publish_at.date() == timedelta(days=2)
        assert "weekly newsletter" in data["explanation"]

    def test_without_registration(self, superuser_client: Client) -> None:
        response = superuser_client.get(reverse("api:default_schedule"), {"requires_registration": "false"})

        assert response.status_code == 200
        assert response.json()["registration_opens_at"] is None


def test_waitlisted_registration_status_is_consistent(full_tier: list[Registration]) -> None:
    assert [r.status for r in full_tier] == [
        RegistrationStatus.CONFIRMED,
        RegistrationStatus.CONFIRMED,
        RegistrationStatus.WAITLISTED,
        RegistrationStatus.WAITLISTED,
    ]
