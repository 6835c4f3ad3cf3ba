from rest_framework import serializers
from decimal import Decimal

from apps.accounts.models import BrandCode, User
from apps.accounts.serializers import StaffSerializer
from apps.finance.derivation import RefundType
from .lifecycle import PROCESS_OUTCOMES, RefundStatus
from .models import Refund, RefundMethod


def cost_input():
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        default=Decimal('0.00')
    )


class RefundSerializer(serializers.ModelSerializer):
    """Full refund record."""

    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)
    client_name = serializers.CharField(source='invoice.client_name', read_only=True)
    created_by = StaffSerializer(read_only=True)
    item_returned_by = StaffSerializer(read_only=True)
    is_complete = serializers.BooleanField(read_only=True)
    approved_by = StaffSerializer(read_only=True)
    processed_by = StaffSerializer(read_only=True)
    cancelled_by = StaffSerializer(read_only=True)
    available_actions = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = Refund
        fields = [
            'id',
            'refund_number',
            'brand_code',
            'type',
            'invoice',
            'invoice_number',
            'client_name',
            'reason',
            'amount',
            'refund_method',
            'hammer_price',
            'buyers_premium',
            'international_shipping_cost',
            'local_shipping_cost',
            'handling_insurance_cost',
            'item_returned_by',
            'is_complete',
            'internal_notes',
            'client_notes',
            'status',
            'available_actions',
            'approved_by',
            'approved_at',
            'approval_comments',
            'processed_by',
            'processed_at',
            'refund_date',
            'payment_reference',
            'cancelled_by',
            'cancelled_at',
            'cancellation_reason',
            'created_by',
            'created_at',
        ]
        read_only_fields = fields


class RefundListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for refund lists."""

    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)
    client_name = serializers.CharField(source='invoice.client_name', read_only=True)
    is_complete = serializers.BooleanField(read_only=True)

    class Meta:
        model = Refund
        fields = [
            'id',
            'refund_number',
            'brand_code',
            'type',
            'invoice',
            'invoice_number',
            'client_name',
            'amount',
            'refund_method',
            'is_complete',
            'status',
            'refund_date',
            'created_at',
        ]
        read_only_fields = fields


class RefundCreateSerializer(serializers.Serializer):
    """
    Validate input for raising a refund.

    `amount` is optional; when present it must equal the amount derived
    from `type` and the cost components.
    """

    invoice = serializers.IntegerField()
    type = serializers.ChoiceField(choices=RefundType.choices)
    reason = serializers.CharField(trim_whitespace=True)
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    brand_code = serializers.ChoiceField(choices=BrandCode.choices, required=False)

    hammer_price = cost_input()
    buyers_premium = cost_input()
    international_shipping_cost = cost_input()
    local_shipping_cost = cost_input()
    handling_insurance_cost = cost_input()

    item_returned_by = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )
    internal_notes = serializers.CharField(required=False, allow_blank=True, default='')
    client_notes = serializers.CharField(required=False, allow_blank=True, default='')


class RefundFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for refund filtering.

    Query Parameters:
        type (str): Filter by refund type
        invoice (int): Filter by source invoice
        brand_code (str): Filter by brand
        refund_method (str): Filter by refund method
        status (str): Filter by lifecycle status
        search (str): Refund number, invoice number, client or reason
    """

    type = serializers.ChoiceField(choices=RefundType.choices, required=False)
    invoice = serializers.IntegerField(required=False)
    brand_code = serializers.CharField(required=False)
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices, required=False)
    status = serializers.ChoiceField(choices=RefundStatus.choices, required=False)
    search = serializers.CharField(required=False)


class RefundApprovalInputSerializer(serializers.Serializer):
    """Validate a refund approval; the comment is optional."""

    comments = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class RefundProcessInputSerializer(serializers.Serializer):
    """
    Validate a processing update.

    Fields:
        status (str): processing, completed or failed
        refund_date (date): When the money left; completed refunds default to today
        payment_reference (str): Bank or card reference, optional
    """

    status = serializers.ChoiceField(
        choices=[(value, RefundStatus(value).label) for value in PROCESS_OUTCOMES]
    )
    refund_date = serializers.DateField(required=False, allow_null=True, default=None)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class RefundCancelInputSerializer(serializers.Serializer):
    """Validate a cancellation."""

    reason = serializers.CharField(max_length=2000)


class BreakdownEntrySerializer(serializers.Serializer):
    count = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class RefundStatisticsSerializer(serializers.Serializer):
    total_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    incomplete_count = serializers.IntegerField()
    by_type = serializers.DictField(child=BreakdownEntrySerializer())
    by_method = serializers.DictField(child=BreakdownEntrySerializer())
    by_status = serializers.DictField(child=serializers.IntegerField())
