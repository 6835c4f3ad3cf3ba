"""Refund totals for the dashboard."""

from decimal import Decimal
from typing import Optional

from django.db.models import Count, Sum

from ..lifecycle import RefundStatus
from ..models import Refund, RefundMethod
from apps.finance.derivation import RefundType


def get_refund_statistics(*, brand_code: Optional[str] = None) -> dict:
    """
    Count and sum refunds overall, by type and by method, and count them
    by lifecycle status.

    Every type, method and status is present in the result, with zeros
    where no refunds exist.
    """
    queryset = Refund.objects.all()
    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    totals = queryset.aggregate(count=Count('id'), amount=Sum('amount'))

    def breakdown(field, choices):
        rows = {
            row[field]: row
            for row in queryset.values(field).annotate(count=Count('id'), amount=Sum('amount'))
        }
        return {
            value: {
                'count': rows.get(value, {}).get('count', 0),
                'amount': rows.get(value, {}).get('amount') or Decimal('0.00'),
            }
            for value in choices.values
        }

    status_counts = dict(queryset.values_list('status').annotate(count=Count('id')).order_by())

    return {
        'total_count': totals['count'],
        'total_amount': totals['amount'] or Decimal('0.00'),
        'incomplete_count': queryset.filter(item_returned_by__isnull=True).count(),
        'by_type': breakdown('type', RefundType),
        'by_method': breakdown('refund_method', RefundMethod),
        'by_status': {value: status_counts.get(value, 0) for value in RefundStatus.values},
    }
