import structlog
from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from common.tasks import send_email
from events.models import Registration
from events.utils import club_timezone

logger = structlog.get_logger(__name__)


@shared_task
def notify_registration_promoted(registration_id: str) -> None:
    """Tell a member their waitlisted registration was confirmed."""
    registration = Registration.objects.select_related("member__user", "event", "tier").get(pk=registration_id)
    user = registration.member.user
    if not user.email:
        logger.warning("promotion_notification_skipped", registration_id=registration_id, reason="no_email")
        return

    body = render_to_string(
        "events/emails/registration_promoted.txt",
        {
            "member": registration.member,
            "event": registration.event,
            "tier": registration.tier,
            "start_time": registration.event.start_time.astimezone(club_timezone()),
            "site_name": settings.SITE_NAME,
        },
    )
    send_email(to=user.email, subject=f"You're confirmed for {registration.event.title}", body=body)
    logger.info("promotion_notification_sent", registration_id=registration_id)
