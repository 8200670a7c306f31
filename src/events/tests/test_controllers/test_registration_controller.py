"""Tests for the member-facing registration endpoints."""

import typing as t
from datetime import timedelta

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken

from conftest import ClubUserFactory
from events.enums import EventStatus, RegistrationStatus
from events.models import Event, Registration, TicketTier
from events.tests.conftest import MemberFactory
from membership.models import Member, MembershipStatus

pytestmark = pytest.mark.django_db


def register_url(event: Event) -> str:
    return reverse("api:register_for_event", kwargs={"event_id": event.pk})


def client_for(member: Member) -> Client:
    refresh = RefreshToken.for_user(member.user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


class TestRegisterEndpoint:
    def test_confirmed_registration(
        self, member_client: Client, member: Member, open_event: Event, standard_tier: TicketTier
    ) -> None:
        response = member_client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["message"] == "Successfully registered for event"
        assert data["registration"]["status"] == RegistrationStatus.CONFIRMED
        assert data["registration"]["ticket_tier_id"] == str(standard_tier.pk)
        assert data["registration"]["waitlist_position"] is None
        assert Registration.objects.get(member=member).status == RegistrationStatus.CONFIRMED

    def test_waitlisted_registration_reports_position(
        self, member_factory: MemberFactory, open_event: Event, standard_tier: TicketTier
    ) -> None:
        members = [member_factory() for _ in range(3)]
        responses = [
            client_for(m).post(
                register_url(open_event),
                data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
                content_type="application/json",
            )
            for m in members
        ]

        last = responses[-1].json()
        assert responses[-1].status_code == 201
        assert last["message"] == "Added to waitlist at position 1"
        assert last["registration"]["status"] == RegistrationStatus.WAITLISTED
        assert last["registration"]["waitlist_position"] == 1

    def test_duplicate_is_conflict(self, member_client: Client, open_event: Event, standard_tier: TicketTier) -> None:
        payload = orjson.dumps({"ticket_tier_id": str(standard_tier.pk)})
        member_client.post(register_url(open_event), data=payload, content_type="application/json")

        response = member_client.post(register_url(open_event), data=payload, content_type="application/json")

        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_REGISTERED"

    def test_ineligible_returns_reason(
        self,
        member_factory: MemberFactory,
        lapsed_status: MembershipStatus,
        open_event: Event,
        standard_tier: TicketTier,
    ) -> None:
        lapsed = member_factory(status=lapsed_status)

        response = client_for(lapsed).post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "NOT_MEMBER_ON_EVENT_DATE"
        assert data["allowed"] is False
        assert data["reason_code"] == "NOT_MEMBER_ON_EVENT_DATE"

    def test_user_without_member_record(
        self, club_user_factory: ClubUserFactory, open_event: Event, standard_tier: TicketTier
    ) -> None:
        refresh = RefreshToken.for_user(club_user_factory())
        client = Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]

        response = client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NOT_A_MEMBER"

    def test_registration_not_open(self, member_client: Client, open_event: Event, standard_tier: TicketTier) -> None:
        open_event.registration_opens_at = timezone.now() + timedelta(days=1)
        open_event.save()

        response = member_client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "REGISTRATION_NOT_OPEN"

    def test_unknown_tier(self, member_client: Client, open_event: Event) -> None:
        response = member_client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(open_event.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 404
        assert response.json()["code"] == "TICKET_TIER_NOT_FOUND"

    def test_malformed_tier_id(self, member_client: Client, open_event: Event) -> None:
        response = member_client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": "not-a-uuid"}),
            content_type="application/json",
        )

        assert response.status_code == 422

    def test_requires_authentication(self, client: Client, open_event: Event, standard_tier: TicketTier) -> None:
        response = client.post(
            register_url(open_event),
            data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
            content_type="application/json",
        )

        assert response.status_code == 401


class TestCancelEndpoint:
    def test_cancel_promotes_waitlist(
        self, member_factory: MemberFactory, open_event: Event, standard_tier: TicketTier
    ) -> None:
        first, second, queued = [member_factory() for _ in range(3)]
        for m in (first, second, queued):
            client_for(m).post(
                register_url(open_event),
                data=orjson.dumps({"ticket_tier_id": str(standard_tier.pk)}),
                content_type="application/json",
            )

        response = client_for(first).delete(register_url(open_event))

        assert response.status_code == 204
        assert Registration.objects.get(member=queued).status == RegistrationStatus.CONFIRMED

    def test_nothing_to_cancel(self, member_client: Client, open_event: Event) -> None:
        response = member_client.delete(register_url(open_event))

        assert response.status_code == 404
        assert response.json()["code"] == "REGISTRATION_NOT_FOUND"


class TestEligibilityEndpoint:
    def test_lists_verdict_per_tier(
        self,
        member_client: Client,
        open_event: Event,
        standard_tier: TicketTier,
        working_tier: TicketTier,
    ) -> None:
        url = reverse("api:ticket_eligibility", kwargs={"event_id": open_event.pk})

        response = member_client.get(url)

        assert response.status_code == 200
        tiers = {entry["code"]: entry["eligibility"] for entry in response.json()["ticket_types"]}
        assert tiers["standard"] == {"allowed": True, "reason_code": "ALLOWED", "reason_detail": None}
        assert tiers["working"]["allowed"] is False
        assert tiers["working"]["reason_code"] == "NOT_IN_WORKING_COMMITTEE"

    def test_unknown_event(self, member_client: Client, member: Member) -> None:
        response = member_client.get(reverse("api:ticket_eligibility", kwargs={"event_id": member.pk}))

        assert response.status_code == 404
        assert response.json()["code"] == "EVENT_NOT_FOUND"


class TestEventStatusEndpoint:
    def test_open_event(self, client: Client, open_event: Event) -> None:
        response = client.get(reverse("api:event_status", kwargs={"event_id": open_event.pk}))

        assert response.status_code == 200
        data = response.json()
        assert data["operational_status"] == "OPEN_FOR_REGISTRATION"
        assert data["label"] == "Open for Registration"
        assert data["visibility"] == "VISIBLE"
        assert data["registration_state"] == "OPEN"

    def test_announced_event_has_opening_message(self, client: Client, next_week: t.Any) -> None:
        event = Event.objects.create(
            title="Book Club",
            slug="book-club",
            status=EventStatus.PUBLISHED,
            start_time=next_week,
            registration_opens_at=next_week - timedelta(days=2),
        )

        response = client.get(reverse("api:event_status", kwargs={"event_id": event.pk}))

        data = response.json()
        assert data["operational_status"] == "ANNOUNCED_NOT_OPEN"
        assert data["registration_opens_message"].startswith("Registration opens ")

    def test_draft_event_is_hidden(self, client: Client, next_week: t.Any) -> None:
        draft = Event.objects.create(title="Secret", slug="secret", start_time=next_week)

        response = client.get(reverse("api:event_status", kwargs={"event_id": draft.pk}))

        assert response.status_code == 404
