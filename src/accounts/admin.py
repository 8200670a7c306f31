"""Admin interface for the accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import ClubUser


@admin.register(ClubUser)
class ClubUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[misc]
    list_display = ["username", "email", "display_name", "is_staff", "is_active", "date_joined"]
    list_filter = ["is_staff", "is_superuser", "is_active"]
    search_fields = ["username", "email", "first_name", "last_name", "preferred_name"]
    ordering = ["username"]
    fieldsets = (
        *UserAdmin.fieldsets,
        ("Profile", {"fields": ("preferred_name", "language")}),
    )
