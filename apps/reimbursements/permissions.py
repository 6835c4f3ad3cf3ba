"""
Role gating for the reimbursement approval chain.

Each stage belongs to one staff role; superusers may act on any stage.
Services call these helpers after the transition itself has been found
legal, so an out-of-sequence attempt reports a conflict whatever the
caller's role.
"""
from rest_framework.permissions import BasePermission

from apps.accounts.models import StaffRole
from .approval import Stage

STAGE_ROLES = {
    Stage.DIRECTOR1: StaffRole.DIRECTOR1,
    Stage.DIRECTOR2: StaffRole.DIRECTOR2,
    Stage.ACCOUNTANT: StaffRole.ACCOUNTANT,
}

PAYMENT_ROLE = StaffRole.ACCOUNTANT


def can_act_on_stage(user, stage) -> bool:
    return user.has_role(STAGE_ROLES[Stage(stage)])


def can_complete_payment(user) -> bool:
    return user.has_role(PAYMENT_ROLE)


def stages_for_user(user) -> list:
    """Stages the user may decide, in workflow order."""
    return [stage for stage in STAGE_ROLES if can_act_on_stage(user, stage)]


class HasApprovalRole(BasePermission):
    """
    Allows access to approvers only.

    Usage:
        @action(detail=False, permission_classes=[IsAuthenticated, HasApprovalRole])
        def pending_approvals(self, request):
            ...
    """

    message = 'Only directors and accountants can review reimbursements.'

    def has_permission(self, request, view):
        return bool(stages_for_user(request.user))
