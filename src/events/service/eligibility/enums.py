"""Enums for the ticket eligibility system."""

from enum import StrEnum


class ReasonCode(StrEnum):
    """Why a member was allowed or denied a ticket tier."""

    ALLOWED = "ALLOWED"
    OVERRIDE_ALLOWED = "OVERRIDE_ALLOWED"
    OVERRIDE_DENIED = "OVERRIDE_DENIED"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    NOT_MEMBER_ON_EVENT_DATE = "NOT_MEMBER_ON_EVENT_DATE"
    WRONG_MEMBER_LEVEL = "WRONG_MEMBER_LEVEL"
    NEWBIE_TO_NEWCOMER_ALLOWED = "NEWBIE_TO_NEWCOMER_ALLOWED"
    NOT_IN_SPONSORING_COMMITTEE = "NOT_IN_SPONSORING_COMMITTEE"
    NOT_IN_WORKING_COMMITTEE = "NOT_IN_WORKING_COMMITTEE"
    NOT_APPLICABLE = "NOT_APPLICABLE"


# Membership level codes that tiers use to restrict access.
NEWCOMER_STATUS = "newcomer"
EXTENDED_STATUS = "extended"
