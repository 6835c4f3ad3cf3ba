"""
Refund approval, processing and cancellation.

Each transition locks the row, checks legality against the stored status
and only then checks the caller's role, so an out-of-sequence request is
reported as a conflict whoever sends it.
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.finance.exceptions import IllegalTransitionError
from ..lifecycle import RefundStatus, ensure_can_transition
from ..models import Refund
from ..permissions import can_approve_refund, can_cancel_refund, can_process_refund
from .exceptions import (
    InvalidRefundError,
    RefundForbiddenError,
    RefundNotFoundError,
)

logger = logging.getLogger(__name__)


def _lock(refund_id) -> Refund:
    try:
        return Refund.objects.select_for_update().get(id=refund_id)
    except (Refund.DoesNotExist, DjangoValidationError, ValueError):
        raise RefundNotFoundError(f"Refund {refund_id} not found")


def _check(refund, target):
    try:
        ensure_can_transition(refund.status, target)
    except IllegalTransitionError as e:
        logger.warning("Refund %s -> %s refused: %s", refund.refund_number, target, e)
        raise


@transaction.atomic
def approve_refund(*, refund_id, actor, comments: str = '') -> Refund:
    """
    Approve a pending refund.

    Raises:
        RefundNotFoundError: If the refund does not exist
        IllegalTransitionError: Unless the refund is pending
        RefundForbiddenError: If the actor is not a director
    """
    refund = _lock(refund_id)
    _check(refund, RefundStatus.APPROVED)

    if not can_approve_refund(actor):
        raise RefundForbiddenError("Only a director can approve a refund")

    refund.approve(actor=actor, comments=(comments or '').strip())

    logger.info("Refund %s approved by %s", refund.refund_number, actor.email)
    return refund


@transaction.atomic
def process_refund(
    *,
    refund_id,
    actor,
    status: str,
    refund_date=None,
    payment_reference: Optional[str] = '',
) -> Refund:
    """
    Record the payout of an approved refund.

    Args:
        refund_id: Refund to process
        actor: Accountant processing it
        status: 'processing', 'completed' or 'failed'
        refund_date: Date the money left; completed refunds default to today
        payment_reference: Bank or card reference, optional

    Returns:
        The updated Refund

    Raises:
        RefundNotFoundError: If the refund does not exist
        IllegalTransitionError: If the refund may not move to `status`
        RefundForbiddenError: If the actor is not an accountant
    """
    refund = _lock(refund_id)
    _check(refund, status)

    if not can_process_refund(actor):
        raise RefundForbiddenError("Only an accountant can process a refund")

    refund.record_processing(
        actor=actor,
        status=status,
        refund_date=refund_date,
        payment_reference=(payment_reference or '').strip(),
    )

    logger.info(
        "Refund %s marked %s by %s (ref %s)",
        refund.refund_number, refund.status, actor.email, refund.payment_reference or '-',
    )
    return refund


@transaction.atomic
def cancel_refund(*, refund_id, actor, reason: str) -> Refund:
    """
    Cancel a refund before it is processed.

    Raises:
        InvalidRefundError: If no reason is given
        RefundNotFoundError: If the refund does not exist
        IllegalTransitionError: Unless the refund is pending or approved
        RefundForbiddenError: Unless the actor raised the refund or is a director
    """
    if not (reason or '').strip():
        raise InvalidRefundError("A cancellation reason is required")

    refund = _lock(refund_id)
    _check(refund, RefundStatus.CANCELLED)

    if not can_cancel_refund(actor, refund):
        raise RefundForbiddenError("Only the requester or a director can cancel a refund")

    refund.cancel(actor=actor, reason=reason.strip())

    logger.info("Refund %s cancelled by %s", refund.refund_number, actor.email)
    return refund
