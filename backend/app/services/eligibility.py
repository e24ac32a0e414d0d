"""Eligibility evaluator: which memberships owe a charge this period."""

from collections.abc import Iterable
from typing import Any

from app.core.exceptions import ValidationError
from app.models.member import MemberStatus
from app.models.membership import MembershipStatus


def parse_member_status(value: Any) -> MemberStatus:
    try:
        return MemberStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown member status: {value!r}") from None


def parse_membership_status(value: Any) -> MembershipStatus:
    try:
        return MembershipStatus(value)
    except ValueError:
        raise ValidationError(f"Malformed membership: unknown status {value!r}") from None


def is_eligible(member_status: MemberStatus, membership_status: MembershipStatus, auto_renewal: bool) -> bool:
    if member_status in (MemberStatus.INACTIVE, MemberStatus.SUSPENDED):
        return False
    if member_status != MemberStatus.ACTIVE:
        raise ValidationError(f"Unhandled member status: {member_status!r}")

    if membership_status in (MembershipStatus.PAUSED, MembershipStatus.CANCELLED):
        return False
    if membership_status != MembershipStatus.ACTIVE:
        raise ValidationError(f"Unhandled membership status: {membership_status!r}")

    return bool(auto_renewal)


def eligible_memberships(member: Any, memberships: Iterable[Any]) -> list[Any]:
    """Return the memberships of ``member`` that should be charged.

    Pure: works on ORM rows or any object exposing ``status`` and
    ``auto_renewal``. Raises ``ValidationError`` on unknown status values.
    """
    member_status = parse_member_status(member.status)
    if member_status != MemberStatus.ACTIVE:
        return []
    return [
        m
        for m in memberships
        if is_eligible(member_status, parse_membership_status(m.status), bool(m.auto_renewal))
    ]
