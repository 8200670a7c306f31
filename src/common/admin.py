import typing as t

from django.contrib import admin
from unfold.admin import ModelAdmin

from common.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["created_at", "action", "resource_type", "resource_id", "actor_id"]
    list_filter = ["action", "resource_type"]
    search_fields = ["resource_id", "actor_id"]
    readonly_fields = [
        "id",
        "action",
        "resource_type",
        "resource_id",
        "actor_id",
        "before",
        "after",
        "metadata",
        "created_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request: t.Any) -> bool:
        return False

    def has_change_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False
