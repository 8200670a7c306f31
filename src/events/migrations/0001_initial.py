import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models
from django.db.models import Q

EVENT_STATUS_CHOICES = [
    ("DRAFT", "Draft"),
    ("PENDING_APPROVAL", "Pending Approval"),
    ("CHANGES_REQUESTED", "Changes Requested"),
    ("APPROVED", "Approved"),
    ("PUBLISHED", "Published"),
    ("CANCELED", "Canceled"),
    ("ARCHIVED", "Archived"),
]

REGISTRATION_STATUS_CHOICES = [
    ("CONFIRMED", "Confirmed"),
    ("PENDING_PAYMENT", "Pending Payment"),
    ("WAITLISTED", "Waitlisted"),
    ("CANCELLED", "Cancelled"),
    ("REFUNDED", "Refunded"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("membership", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(choices=EVENT_STATUS_CHOICES, db_index=True, default="DRAFT", max_length=32),
                ),
                (
                    "publish_at",
                    models.DateTimeField(blank=True, help_text="When an approved event becomes visible.", null=True),
                ),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("requires_registration", models.BooleanField(default=True)),
                ("registration_opens_at", models.DateTimeField(blank=True, null=True)),
                (
                    "registration_deadline",
                    models.DateTimeField(blank=True, help_text="Defaults to the start time when empty.", null=True),
                ),
                ("start_time", models.DateTimeField(db_index=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["start_time"],
            },
        ),
        migrations.CreateModel(
            name="EventSponsorship",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("is_primary", models.BooleanField(default=False)),
                (
                    "committee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sponsorships",
                        to="membership.committee",
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sponsorships",
                        to="events.event",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("event", "committee"), name="unique_event_sponsorship"),
                ],
            },
        ),
        migrations.AddField(
            model_name="event",
            name="sponsoring_committees",
            field=models.ManyToManyField(
                blank=True,
                related_name="sponsored_events",
                through="events.EventSponsorship",
                to="membership.committee",
            ),
        ),
        migrations.CreateModel(
            name="TicketTier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("code", models.SlugField(max_length=64)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("member_standard", "Member Standard"),
                            ("sponsor_committee", "Sponsor Committee"),
                            ("working_committee", "Working Committee"),
                        ],
                        default="member_standard",
                        max_length=32,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(help_text="Number of seats in this tier.")),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("sort_order", models.PositiveSmallIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("allowed_member_statuses", models.JSONField(blank=True, default=list)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_tiers",
                        to="events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "code"), name="unique_ticket_tier_code_per_event"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EligibilityOverride",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("outcome", models.CharField(choices=[("ALLOW", "Allow"), ("DENY", "Deny")], max_length=8)),
                ("reason", models.TextField(blank=True, default="")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="eligibility_overrides",
                        to="events.event",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="eligibility_overrides",
                        to="membership.member",
                    ),
                ),
                (
                    "tier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="eligibility_overrides",
                        to="events.tickettier",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("member", "event", "tier"), name="unique_eligibility_override"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("status", models.CharField(choices=REGISTRATION_STATUS_CHOICES, db_index=True, max_length=20)),
                ("waitlist_position", models.PositiveIntegerField(blank=True, null=True)),
                ("registered_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("promoted_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="membership.member",
                    ),
                ),
                (
                    "tier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="events.tickettier",
                    ),
                ),
            ],
            options={
                "ordering": ["registered_at"],
                "indexes": [models.Index(fields=["tier", "status"], name="registration_tier_status_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=~Q(status__in=["CANCELLED", "REFUNDED"]),
                        fields=("member", "event"),
                        name="unique_active_registration_per_member_event",
                    ),
                    models.UniqueConstraint(
                        condition=Q(status="WAITLISTED"),
                        fields=("tier", "waitlist_position"),
                        name="unique_waitlist_position_per_tier",
                    ),
                    models.CheckConstraint(
                        condition=Q(status="WAITLISTED", waitlist_position__isnull=False, waitlist_position__gte=1)
                        | (~Q(status="WAITLISTED") & Q(waitlist_position__isnull=True)),
                        name="waitlist_position_iff_waitlisted",
                    ),
                ],
            },
        ),
    ]
