"""
Reimbursement approval state machine.

Three sign-offs happen in a fixed order: director1, director2, accountant.
Each is decided exactly once. A rejection at any stage is final for the
whole request, and payment can only be completed after the accountant has
approved. The aggregate status is never stored on its own authority; it is
projected from the sub-approvals by aggregate_status().

This module is shared by the server (model save and services) and by the
client-side ApprovalDesk, so it imports no models.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Optional

from django.db import models

from apps.finance.exceptions import IllegalTransitionError


class ApprovalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class ReimbursementStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    DIRECTOR1_APPROVED = 'director1_approved', 'Director 1 Approved'
    DIRECTOR2_APPROVED = 'director2_approved', 'Director 2 Approved'
    FULLY_APPROVED = 'fully_approved', 'Fully Approved'
    PAID = 'paid', 'Paid'
    REJECTED = 'rejected', 'Rejected'


class Stage(models.TextChoices):
    DIRECTOR1 = 'director1', 'Director 1'
    DIRECTOR2 = 'director2', 'Director 2'
    ACCOUNTANT = 'accountant', 'Accountant'


class Action(models.TextChoices):
    """Endpoint slugs under /api/reimbursements/{id}/."""
    APPROVE_DIRECTOR1 = 'approve-director1', 'Director 1 Decision'
    APPROVE_DIRECTOR2 = 'approve-director2', 'Director 2 Decision'
    APPROVE_ACCOUNTANT = 'approve-accountant', 'Accountant Decision'
    COMPLETE_PAYMENT = 'complete-payment', 'Complete Payment'


STAGE_ORDER = (Stage.DIRECTOR1, Stage.DIRECTOR2, Stage.ACCOUNTANT)

STAGE_ACTIONS = {
    Stage.DIRECTOR1: Action.APPROVE_DIRECTOR1,
    Stage.DIRECTOR2: Action.APPROVE_DIRECTOR2,
    Stage.ACCOUNTANT: Action.APPROVE_ACCOUNTANT,
}

# Stage that must be approved before the key stage may decide
PREREQUISITE = {
    Stage.DIRECTOR1: None,
    Stage.DIRECTOR2: Stage.DIRECTOR1,
    Stage.ACCOUNTANT: Stage.DIRECTOR2,
}

TERMINAL_STATUSES = frozenset({ReimbursementStatus.PAID, ReimbursementStatus.REJECTED})


@dataclass(frozen=True)
class ApprovalState:
    director1: str = ApprovalStatus.PENDING
    director2: str = ApprovalStatus.PENDING
    accountant: str = ApprovalStatus.PENDING
    payment_completed: bool = False

    @classmethod
    def from_record(cls, record) -> 'ApprovalState':
        """
        Read the sub-approvals from a model instance or an API dict.

        Payment counts as completed when either payment_completed_at is set
        or the record already reports the paid status, so list and pending
        payloads without the timestamp still read as paid.
        """
        if isinstance(record, Mapping):
            get = record.get
        else:
            def get(name, default=None):
                return getattr(record, name, default)

        return cls(
            director1=get('director1_approval_status') or ApprovalStatus.PENDING,
            director2=get('director2_approval_status') or ApprovalStatus.PENDING,
            accountant=get('accountant_approval_status') or ApprovalStatus.PENDING,
            payment_completed=(
                bool(get('payment_completed_at'))
                or get('status') == ReimbursementStatus.PAID
            ),
        )

    def get(self, stage) -> str:
        return getattr(self, Stage(stage).value)

    @property
    def status(self) -> str:
        return aggregate_status(self)

    def with_decision(self, stage, approved: bool) -> 'ApprovalState':
        """Return the state after a stage decision, or raise if it is illegal."""
        ensure_can_decide(self, stage)
        outcome = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        return replace(self, **{Stage(stage).value: outcome})

    def with_payment(self) -> 'ApprovalState':
        ensure_can_complete_payment(self)
        return replace(self, payment_completed=True)


def aggregate_status(state: ApprovalState) -> str:
    """Project the sub-approvals onto a single status."""
    subs = (state.director1, state.director2, state.accountant)
    if ApprovalStatus.REJECTED in subs:
        return ReimbursementStatus.REJECTED
    if state.payment_completed:
        return ReimbursementStatus.PAID
    if state.accountant == ApprovalStatus.APPROVED:
        return ReimbursementStatus.FULLY_APPROVED
    if state.director2 == ApprovalStatus.APPROVED:
        return ReimbursementStatus.DIRECTOR2_APPROVED
    if state.director1 == ApprovalStatus.APPROVED:
        return ReimbursementStatus.DIRECTOR1_APPROVED
    return ReimbursementStatus.PENDING


def _blocker(state: ApprovalState, stage) -> Optional[str]:
    """Why `stage` cannot decide now, or None if it can."""
    stage = Stage(stage)
    label = stage.label

    if aggregate_status(state) == ReimbursementStatus.REJECTED:
        return f"Reimbursement has been rejected; {label} can no longer decide"
    if state.get(stage) != ApprovalStatus.PENDING:
        return f"{label} has already decided ({state.get(stage)})"

    prerequisite = PREREQUISITE[stage]
    if prerequisite is not None and state.get(prerequisite) != ApprovalStatus.APPROVED:
        return f"{prerequisite.label} must approve before {label}"

    return None


def can_decide(state: ApprovalState, stage) -> bool:
    return _blocker(state, stage) is None


def ensure_can_decide(state: ApprovalState, stage) -> None:
    """
    Raises:
        IllegalTransitionError: If the stage may not decide in this state
    """
    reason = _blocker(state, stage)
    if reason is not None:
        raise IllegalTransitionError(reason, field=Stage(stage).value)


def can_complete_payment(state: ApprovalState) -> bool:
    return aggregate_status(state) == ReimbursementStatus.FULLY_APPROVED


def ensure_can_complete_payment(state: ApprovalState) -> None:
    """
    Raises:
        IllegalTransitionError: Unless the reimbursement is fully approved
    """
    if not can_complete_payment(state):
        raise IllegalTransitionError(
            f"Payment can only be completed once fully approved "
            f"(current status: {aggregate_status(state)})",
            field='payment',
        )


def pending_stage(state: ApprovalState) -> Optional[str]:
    """The stage whose decision is awaited, or None."""
    for stage in STAGE_ORDER:
        if can_decide(state, stage):
            return stage
    return None


def available_actions(state: ApprovalState) -> list:
    """Actions that are legal right now, in workflow order."""
    stage = pending_stage(state)
    if stage is not None:
        return [STAGE_ACTIONS[stage]]
    if can_complete_payment(state):
        return [Action.COMPLETE_PAYMENT]
    return []
