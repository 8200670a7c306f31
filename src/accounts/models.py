import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class ClubUserQueryset(models.QuerySet["ClubUser"]):
    """Queryset for ClubUser."""


class ClubUserManager(UserManager["ClubUser"]):
    def get_queryset(self) -> ClubUserQueryset:
        """Get queryset for ClubUser."""
        return ClubUserQueryset(self.model)


class ClubUser(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )

    objects = ClubUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return self.username

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)
