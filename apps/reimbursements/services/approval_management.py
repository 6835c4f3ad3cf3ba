"""
Approval decisions and payment completion.

Every transition locks the row with select_for_update() inside a
transaction, re-reads the sub-approvals and only then checks legality and
role. Two reviewers racing on the same record therefore see one success
and one IllegalTransitionError.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.finance.exceptions import IllegalTransitionError
from ..approval import Stage, ensure_can_complete_payment, ensure_can_decide
from ..models import Reimbursement
from ..permissions import can_act_on_stage, can_complete_payment
from .exceptions import (
    InvalidDecisionError,
    ReimbursementNotFoundError,
    StageForbiddenError,
)

logger = logging.getLogger(__name__)


def _lock(reimbursement_id) -> Reimbursement:
    try:
        return Reimbursement.objects.select_for_update().get(id=reimbursement_id)
    except (Reimbursement.DoesNotExist, DjangoValidationError, ValueError):
        raise ReimbursementNotFoundError(f"Reimbursement {reimbursement_id} not found")


@transaction.atomic
def decide_stage(
    *,
    reimbursement_id,
    stage,
    actor,
    approved: bool,
    comments: str,
    rejection_reason: str = '',
    payment_reference: str = '',
) -> Reimbursement:
    """
    Record a director or accountant decision.

    Args:
        reimbursement_id: Record to decide on
        stage: Stage value ('director1', 'director2', 'accountant')
        actor: Staff member deciding
        approved: Approve or reject
        comments: Mandatory audit comment
        rejection_reason: Mandatory when rejecting
        payment_reference: Optional, recorded on accountant approval

    Returns:
        The updated Reimbursement

    Raises:
        ReimbursementNotFoundError: If the record does not exist
        InvalidDecisionError: If comments or rejection reason are missing
        IllegalTransitionError: If the stage may not decide now
        StageForbiddenError: If the actor does not hold the stage's role
    """
    stage = Stage(stage)

    if not (comments or '').strip():
        raise InvalidDecisionError("Comments are required for every decision")
    if not approved and not (rejection_reason or '').strip():
        raise InvalidDecisionError("A rejection reason is required")

    reimbursement = _lock(reimbursement_id)

    try:
        ensure_can_decide(reimbursement.approval_state, stage)
    except IllegalTransitionError as e:
        logger.warning(
            "%s decision on %s refused: %s",
            stage.label, reimbursement.reimbursement_number, e,
        )
        raise

    if not can_act_on_stage(actor, stage):
        raise StageForbiddenError(f"Only {stage.label} can decide this stage")

    reimbursement.record_decision(
        stage=stage,
        approved=approved,
        actor=actor,
        comments=comments.strip(),
        rejection_reason=(rejection_reason or '').strip(),
        payment_reference=(payment_reference or '').strip(),
    )

    logger.info(
        "%s %s reimbursement %s (status now %s)",
        actor.email, 'approved' if approved else 'rejected',
        reimbursement.reimbursement_number, reimbursement.status,
    )
    return reimbursement


@transaction.atomic
def complete_payment(*, reimbursement_id, actor, payment_reference: str,
                     comments: str = '') -> Reimbursement:
    """
    Mark a fully approved reimbursement as paid.

    Raises:
        ReimbursementNotFoundError: If the record does not exist
        InvalidDecisionError: If no payment reference is given
        IllegalTransitionError: Unless the record is fully approved
        StageForbiddenError: If the actor is not an accountant
    """
    if not (payment_reference or '').strip():
        raise InvalidDecisionError("A payment reference is required")

    reimbursement = _lock(reimbursement_id)

    try:
        ensure_can_complete_payment(reimbursement.approval_state)
    except IllegalTransitionError as e:
        logger.warning("Payment on %s refused: %s", reimbursement.reimbursement_number, e)
        raise

    if not can_complete_payment(actor):
        raise StageForbiddenError("Only an accountant can complete payment")

    reimbursement.complete_payment(
        actor=actor,
        payment_reference=payment_reference.strip(),
        comments=(comments or '').strip(),
    )

    logger.info(
        "Reimbursement %s paid (ref %s) by %s",
        reimbursement.reimbursement_number, reimbursement.payment_reference, actor.email,
    )
    return reimbursement
