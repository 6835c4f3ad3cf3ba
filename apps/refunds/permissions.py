"""
Role gating for the refund lifecycle.

Directors approve, accountants process, and a pending or approved refund
may be cancelled by whoever raised it or by a director. Superusers hold
every role through User.has_role().
"""
from apps.accounts.models import StaffRole

APPROVAL_ROLES = (StaffRole.DIRECTOR1, StaffRole.DIRECTOR2)

PROCESSING_ROLE = StaffRole.ACCOUNTANT


def can_approve_refund(user) -> bool:
    return any(user.has_role(role) for role in APPROVAL_ROLES)


def can_process_refund(user) -> bool:
    return user.has_role(PROCESSING_ROLE)


def can_cancel_refund(user, refund) -> bool:
    return refund.created_by_id == user.id or can_approve_refund(user)
