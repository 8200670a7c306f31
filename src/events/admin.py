"""Admin interface for the events app."""

import typing as t

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils import timezone
from unfold.admin import ModelAdmin, TabularInline

from events.models import EligibilityOverride, Event, EventSponsorship, Registration, TicketTier
from events.service.operational_status import operational_status_label


class EventSponsorshipInline(TabularInline):  # type: ignore[misc]
    model = EventSponsorship
    extra = 0
    autocomplete_fields = ["committee"]


class TicketTierInline(TabularInline):  # type: ignore[misc]
    model = TicketTier
    extra = 0
    fields = ["code", "name", "category", "quantity", "price_cents", "sort_order", "is_active"]
    prepopulated_fields = {"code": ("name",)}


@admin.register(Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["title", "status", "operational_status_display", "start_time", "requires_registration"]
    list_filter = ["status", "requires_registration"]
    search_fields = ["title", "slug"]
    prepopulated_fields = {"slug": ("title",)}
    date_hierarchy = "start_time"
    inlines = [EventSponsorshipInline, TicketTierInline]
    fieldsets = (
        (None, {"fields": ("title", "slug", "description", "status")}),
        ("Publication", {"fields": ("publish_at", "published_at")}),
        (
            "Registration",
            {"fields": ("requires_registration", "registration_opens_at", "registration_deadline")},
        ),
        ("Timing", {"fields": ("start_time", "end_time")}),
    )

    @admin.display(description="Operational status")
    def operational_status_display(self, obj: Event) -> str:
        return operational_status_label(obj.operational_status(timezone.now()))


@admin.register(TicketTier)
class TicketTierAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "event", "category", "quantity", "price_cents", "is_active"]
    list_filter = ["category", "is_active"]
    search_fields = ["name", "code", "event__title"]
    autocomplete_fields = ["event"]
    list_select_related = ["event"]


@admin.register(EligibilityOverride)
class EligibilityOverrideAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["member", "event", "tier", "outcome", "created_by", "created_at"]
    list_filter = ["outcome"]
    search_fields = ["member__user__username", "event__title", "reason"]
    autocomplete_fields = ["member", "event", "tier"]
    readonly_fields = ["created_by"]
    list_select_related = ["member__user", "event", "tier"]

    def save_model(self, request: HttpRequest, obj: EligibilityOverride, form: t.Any, change: bool) -> None:
        if not obj.created_by_id:
            obj.created_by = request.user  # type: ignore[assignment]
        super().save_model(request, obj, form, change)


@admin.register(Registration)
class RegistrationAdmin(ModelAdmin):  # type: ignore[misc]
    """Read-only view; registrations change only through the admission controller."""

    list_display = ["member", "event", "tier", "status", "waitlist_position", "registered_at"]
    list_filter = ["status", "tier__category"]
    search_fields = ["member__user__username", "member__user__email", "event__title"]
    list_select_related = ["member__user", "event", "tier"]
    ordering = ["event", "tier", "waitlist_position", "registered_at"]

    def get_readonly_fields(self, request: HttpRequest, obj: Registration | None = None) -> list[str]:
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Registration | None = None) -> bool:
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[Registration]:
        return super().get_queryset(request).select_related("member__user", "event", "tier")
