"""Reimbursement search, filtering and approval queues."""

from datetime import date
from typing import Optional

from django.db.models import Q, QuerySet

from ..approval import ReimbursementStatus, Stage
from ..models import Reimbursement
from ..permissions import stages_for_user

# Aggregate status a record sits in while waiting for each stage
AWAITING_STATUS = {
    Stage.DIRECTOR1: ReimbursementStatus.PENDING,
    Stage.DIRECTOR2: ReimbursementStatus.DIRECTOR1_APPROVED,
    Stage.ACCOUNTANT: ReimbursementStatus.DIRECTOR2_APPROVED,
}


def _base_queryset():
    return Reimbursement.objects.select_related(
        'requested_by',
        'created_by',
        'director1_approved_by',
        'director2_approved_by',
        'accountant_approved_by',
        'processed_by',
    )


def search_reimbursements(
    *,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    requested_by=None,
    approval_stage: Optional[str] = None,
    brand_code: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> QuerySet[Reimbursement]:
    """
    Search and filter reimbursements.

    Args:
        search: Matches number, title, description, vendor or claimant
        status: Filter by aggregate status
        category: Filter by expense category
        priority: Filter by priority
        requested_by: Filter by claimant id
        approval_stage: Only records awaiting this stage's decision
        brand_code: Filter by brand
        date_from: Payment date on or after
        date_to: Payment date on or before

    Returns:
        Filtered QuerySet of Reimbursement
    """
    queryset = _base_queryset()

    if search:
        queryset = queryset.filter(
            Q(reimbursement_number__icontains=search) |
            Q(title__icontains=search) |
            Q(description__icontains=search) |
            Q(vendor_name__icontains=search) |
            Q(requested_by__display_name__icontains=search) |
            Q(requested_by__email__icontains=search)
        )

    if status:
        queryset = queryset.filter(status=status)

    if category:
        queryset = queryset.filter(category=category)

    if priority:
        queryset = queryset.filter(priority=priority)

    if requested_by:
        queryset = queryset.filter(requested_by_id=requested_by)

    if approval_stage:
        queryset = queryset.filter(status=AWAITING_STATUS[Stage(approval_stage)])

    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    if date_from:
        queryset = queryset.filter(payment_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(payment_date__lte=date_to)

    return queryset


def get_pending_approvals(*, user, brand_code: Optional[str] = None) -> list[dict]:
    """
    Records waiting for a decision the user is allowed to make.

    Returns:
        One entry per record, oldest first, with the stage it is waiting on
    """
    stages = stages_for_user(user)
    if not stages:
        return []

    queryset = _base_queryset().filter(
        status__in=[AWAITING_STATUS[stage] for stage in stages]
    )
    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    stage_by_status = {AWAITING_STATUS[stage]: stage for stage in stages}

    return [
        {
            'reimbursement_id': reimbursement.id,
            'reimbursement_number': reimbursement.reimbursement_number,
            'title': reimbursement.title,
            'total_amount': reimbursement.total_amount,
            'approval_stage': stage_by_status[reimbursement.status],
            'requested_by_name': reimbursement.requested_by.get_display_name(),
            'priority': reimbursement.priority,
            'created_at': reimbursement.created_at,
        }
        for reimbursement in queryset.order_by('created_at', 'reimbursement_number')
    ]
