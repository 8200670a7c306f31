from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from membership.models import Committee, CommitteeMembership, Member, MembershipStatus


@admin.register(MembershipStatus)
class MembershipStatusAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["code", "label", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["code", "label"]


class CommitteeMembershipInline(TabularInline):  # type: ignore[misc]
    model = CommitteeMembership
    extra = 0
    autocomplete_fields = ["committee"]
    fields = ["committee", "role", "start_date", "end_date"]


@admin.register(Member)
class MemberAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["__str__", "membership_status", "joined_on", "membership_expires_on"]
    list_filter = ["membership_status"]
    search_fields = ["user__username", "user__email", "user__first_name", "user__last_name"]
    autocomplete_fields = ["user"]
    list_select_related = ["user", "membership_status"]
    inlines = [CommitteeMembershipInline]


@admin.register(Committee)
class CommitteeAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "slug", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
