"""Django Unfold admin configuration."""

from django.urls import reverse_lazy
from django.utils.translation import gettext_lazy as _

from .base import SITE_NAME, VERSION

UNFOLD = {
    "SITE_TITLE": f"{SITE_NAME} v{VERSION} Admin",
    "SITE_HEADER": f"{SITE_NAME} v{VERSION} Administration",
    "SITE_URL": "/",
    "SHOW_HISTORY": True,
    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": False,
        "navigation": [
            {
                "title": _("Members"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Users"),
                        "icon": "person",
                        "link": reverse_lazy("admin:accounts_clubuser_changelist"),
                    },
                    {
                        "title": _("Members"),
                        "icon": "badge",
                        "link": reverse_lazy("admin:membership_member_changelist"),
                    },
                    {
                        "title": _("Membership Statuses"),
                        "icon": "verified",
                        "link": reverse_lazy("admin:membership_membershipstatus_changelist"),
                    },
                    {
                        "title": _("Committees"),
                        "icon": "groups",
                        "link": reverse_lazy("admin:membership_committee_changelist"),
                    },
                ],
            },
            {
                "title": _("Events"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Events"),
                        "icon": "event",
                        "link": reverse_lazy("admin:events_event_changelist"),
                    },
                    {
                        "title": _("Registrations"),
                        "icon": "how_to_reg",
                        "link": reverse_lazy("admin:events_registration_changelist"),
                    },
                    {
                        "title": _("Eligibility Overrides"),
                        "icon": "rule",
                        "link": reverse_lazy("admin:events_eligibilityoverride_changelist"),
                    },
                ],
            },
            {
                "title": _("System"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Audit Log"),
                        "icon": "history",
                        "link": reverse_lazy("admin:common_auditlog_changelist"),
                    },
                ],
            },
        ],
    },
}
