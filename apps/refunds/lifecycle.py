"""
Refund status lifecycle.

A refund starts pending, is approved by a director, and is then processed
by accounts: either straight to completed or failed, or via processing
when the payout takes time. Pending and approved refunds may be
cancelled. Completed, cancelled and failed are terminal.

The model, the services and the serializers all read the one transition
table below.
"""

from django.db import models

from apps.finance.exceptions import IllegalTransitionError


class RefundStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    PROCESSING = 'processing', 'Processing'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    FAILED = 'failed', 'Failed'


class RefundAction(models.TextChoices):
    """Endpoint slugs under /api/refunds/{id}/."""
    APPROVE = 'approve', 'Approve'
    PROCESS = 'process', 'Process'
    CANCEL = 'cancel', 'Cancel'


ALLOWED_TRANSITIONS = {
    RefundStatus.PENDING: frozenset({RefundStatus.APPROVED, RefundStatus.CANCELLED}),
    RefundStatus.APPROVED: frozenset({
        RefundStatus.PROCESSING,
        RefundStatus.COMPLETED,
        RefundStatus.FAILED,
        RefundStatus.CANCELLED,
    }),
    RefundStatus.PROCESSING: frozenset({RefundStatus.COMPLETED, RefundStatus.FAILED}),
}

# Statuses the process endpoint may move a refund to
PROCESS_OUTCOMES = (RefundStatus.PROCESSING, RefundStatus.COMPLETED, RefundStatus.FAILED)

TERMINAL_STATUSES = frozenset({
    RefundStatus.COMPLETED,
    RefundStatus.CANCELLED,
    RefundStatus.FAILED,
})


def can_transition(current, target) -> bool:
    allowed = ALLOWED_TRANSITIONS.get(RefundStatus(current), frozenset())
    return RefundStatus(target) in allowed


def ensure_can_transition(current, target) -> None:
    """
    Raises:
        IllegalTransitionError: If a refund in `current` may not move to `target`
    """
    if can_transition(current, target):
        return
    if RefundStatus(current) in TERMINAL_STATUSES:
        message = f"Refund is already {current}"
    else:
        message = f"Refund cannot move from {current} to {target}"
    raise IllegalTransitionError(message, field='status')


def available_actions(status) -> list:
    """Actions that are legal for a refund in `status`, in workflow order."""
    actions = []
    if can_transition(status, RefundStatus.APPROVED):
        actions.append(RefundAction.APPROVE)
    if any(can_transition(status, outcome) for outcome in PROCESS_OUTCOMES):
        actions.append(RefundAction.PROCESS)
    if can_transition(status, RefundStatus.CANCELLED):
        actions.append(RefundAction.CANCEL)
    return actions
