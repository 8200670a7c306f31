
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel


class MembershipStatus(TimeStampedModel):
    """A membership status code as maintained by the membership office.

    Only statuses flagged ``is_active`` grant member-standard ticket access. Level
    codes such as ``newcomer`` and ``extended`` are also statuses so ticket tiers
    can restrict by them.
    """

    code = models.SlugField(max_length=32, unique=True)
    label = models.CharField(max_length=64)
    is_active = models.BooleanField(default=False)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "membership statuses"

    def __str__(self) -> str:
        return self.label


class MemberQuerySet(models.QuerySet["Member"]):
    def with_eligibility_facts(self) -> "MemberQuerySet":
        """Prefetch everything the eligibility evaluator reads."""
        return self.select_related("membership_status", "user").prefetch_related(
            models.Prefetch(
                "committee_memberships",
                queryset=CommitteeMembership.objects.select_related("committee"),
            )
        )


class MemberManager(models.Manager["Member"]):
    def get_queryset(self) -> MemberQuerySet:
        return MemberQuerySet(self.model, using=self._db)

    def with_eligibility_facts(self) -> MemberQuerySet:
        return self.get_queryset().with_eligibility_facts()


class Member(TimeStampedModel):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="member")
    membership_status = models.ForeignKey(MembershipStatus, on_delete=models.PROTECT, related_name="members")
    joined_on = models.DateField(null=True, blank=True)
    membership_expires_on = models.DateField(null=True, blank=True)

    objects = MemberManager()

    class Meta:
        ordering = ["user__username"]

    def __str__(self) -> str:
        return self.user.get_display_name()

    def clean(self) -> None:
        if self.joined_on and self.membership_expires_on and self.membership_expires_on < self.joined_on:
            raise ValidationError({"membership_expires_on": _("Membership cannot expire before it starts.")})


class Committee(TimeStampedModel):
    name = models.CharField(max_length=150)
    slug = models.SlugField(max_length=150, unique=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class CommitteeMembership(TimeStampedModel):
    class Role(models.TextChoices):
        CHAIR = "chair", "Chair"
        CO_CHAIR = "co_chair", "Co-Chair"
        MEMBER = "member", "Member"

    member = models.ForeignKey(Member, on_delete=models.CASCADE, related_name="committee_memberships")
    committee = models.ForeignKey(Committee, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.MEMBER)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["committee__name", "start_date"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(end_date__gte=models.F("start_date")),
                name="committee_membership_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.member} in {self.committee}"
