"""Reimbursement counts and totals for the dashboard."""

from decimal import Decimal
from typing import Optional

from django.db.models import Count, Sum

from ..approval import ReimbursementStatus
from ..models import Category, Priority, Reimbursement


def _counts(queryset, field, choices) -> dict:
    rows = dict(queryset.values_list(field).annotate(count=Count('id')).order_by())
    return {value: rows.get(value, 0) for value in choices.values}


def get_reimbursement_statistics(*, brand_code: Optional[str] = None) -> dict:
    """Totals by status, category and priority plus the per-stage queues."""
    queryset = Reimbursement.objects.all()
    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    totals = queryset.aggregate(count=Count('id'), amount=Sum('total_amount'))
    approved = queryset.filter(
        status__in=[ReimbursementStatus.FULLY_APPROVED, ReimbursementStatus.PAID]
    ).aggregate(amount=Sum('total_amount'))

    by_status = _counts(queryset, 'status', ReimbursementStatus)

    return {
        'total_reimbursements': totals['count'],
        'total_amount': totals['amount'] or Decimal('0.00'),
        'approved_amount': approved['amount'] or Decimal('0.00'),
        'by_status': by_status,
        'by_category': _counts(queryset, 'category', Category),
        'by_priority': _counts(queryset, 'priority', Priority),
        'pending_director1': by_status[ReimbursementStatus.PENDING],
        'pending_director2': by_status[ReimbursementStatus.DIRECTOR1_APPROVED],
        'pending_accountant': by_status[ReimbursementStatus.DIRECTOR2_APPROVED],
        'awaiting_payment': by_status[ReimbursementStatus.FULLY_APPROVED],
    }
