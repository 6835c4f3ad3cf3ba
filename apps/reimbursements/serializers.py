from rest_framework import serializers
from decimal import Decimal

from apps.accounts.models import BrandCode, User
from .approval import ReimbursementStatus, Stage, available_actions
from .models import Reimbursement, Category, Priority


def staff_name(field):
    return serializers.CharField(source=f'{field}.get_display_name', read_only=True, default=None)


class ReimbursementSerializer(serializers.ModelSerializer):
    """Full reimbursement record, including the approval chain."""

    requested_by_name = staff_name('requested_by')
    requested_by_email = serializers.EmailField(source='requested_by.email', read_only=True)
    director1_approved_by_name = staff_name('director1_approved_by')
    director2_approved_by_name = staff_name('director2_approved_by')
    accountant_approved_by_name = staff_name('accountant_approved_by')
    processed_by_name = staff_name('processed_by')
    created_by_name = staff_name('created_by')
    available_actions = serializers.SerializerMethodField()

    class Meta:
        model = Reimbursement
        fields = [
            'id',
            'reimbursement_number',
            'brand_code',
            'title',
            'description',
            'category',
            'purpose',
            'priority',
            'total_amount',
            'currency',
            'tax_rate',
            'tax_amount',
            'net_amount',
            'payment_method',
            'payment_date',
            'vendor_name',
            'vendor_details',
            'receipt_urls',
            'receipt_numbers',
            'has_receipts',
            'department',
            'project_code',
            'cost_center',
            'expected_payment_date',
            'internal_notes',
            'accounting_notes',
            'requested_by',
            'requested_by_name',
            'requested_by_email',
            'status',
            'director1_approval_status',
            'director1_approved_by',
            'director1_approved_by_name',
            'director1_approved_at',
            'director1_comments',
            'director2_approval_status',
            'director2_approved_by',
            'director2_approved_by_name',
            'director2_approved_at',
            'director2_comments',
            'accountant_approval_status',
            'accountant_approved_by',
            'accountant_approved_by_name',
            'accountant_approved_at',
            'accountant_comments',
            'rejection_reason',
            'rejected_by',
            'rejected_at',
            'payment_reference',
            'payment_completed_at',
            'processed_by',
            'processed_by_name',
            'processed_at',
            'available_actions',
            'created_by',
            'created_by_name',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_available_actions(self, obj) -> list[str]:
        return [action.value for action in available_actions(obj.approval_state)]


class ReimbursementListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for reimbursement lists."""

    requested_by_name = staff_name('requested_by')

    class Meta:
        model = Reimbursement
        fields = [
            'id',
            'reimbursement_number',
            'brand_code',
            'title',
            'category',
            'priority',
            'total_amount',
            'net_amount',
            'currency',
            'payment_date',
            'has_receipts',
            'requested_by',
            'requested_by_name',
            'status',
            'director1_approval_status',
            'director2_approval_status',
            'accountant_approval_status',
            'payment_completed_at',
            'created_at',
        ]
        read_only_fields = fields


class ReimbursementCreateSerializer(serializers.ModelSerializer):
    """
    Validate input for a new reimbursement request.

    tax_amount and net_amount are optional; when sent they are checked
    against the amounts derived from total_amount and tax_rate.
    """

    total_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.01')
    )
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1'),
        required=False
    )
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    net_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    requested_by = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False
    )
    receipt_urls = serializers.ListField(
        child=serializers.CharField(max_length=500),
        required=False
    )
    brand_code = serializers.ChoiceField(choices=BrandCode.choices, required=False)

    class Meta:
        model = Reimbursement
        fields = [
            'brand_code',
            'title',
            'description',
            'category',
            'purpose',
            'priority',
            'total_amount',
            'currency',
            'tax_rate',
            'tax_amount',
            'net_amount',
            'payment_method',
            'payment_date',
            'vendor_name',
            'vendor_details',
            'receipt_urls',
            'receipt_numbers',
            'has_receipts',
            'department',
            'project_code',
            'cost_center',
            'expected_payment_date',
            'internal_notes',
            'requested_by',
        ]


class DecisionInputSerializer(serializers.Serializer):
    """
    Validate a stage decision.

    Fields:
        approved (bool): Approve or reject
        comments (str): Mandatory audit comment
        rejection_reason (str): Mandatory when approved is false
        payment_reference (str): Optional, accountant stage only
    """

    approved = serializers.BooleanField(required=True)
    comments = serializers.CharField(max_length=2000)
    rejection_reason = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        """Rejections must say why."""
        if not attrs['approved'] and not attrs.get('rejection_reason', '').strip():
            raise serializers.ValidationError({
                'rejection_reason': 'A rejection reason is required when rejecting'
            })
        return attrs


class PaymentInputSerializer(serializers.Serializer):
    """Validate payment completion."""

    payment_reference = serializers.CharField(max_length=100)
    comments = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class ReimbursementFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for reimbursement filtering.

    Query Parameters:
        status, category, priority (str): Exact filters
        requested_by (UUID): Claimant
        approval_stage (str): Records awaiting this stage
        brand_code (str): Brand
        date_from, date_to (date): Payment date range
        search (str): Number, title, description, vendor or claimant
    """

    status = serializers.ChoiceField(choices=ReimbursementStatus.choices, required=False)
    category = serializers.ChoiceField(choices=Category.choices, required=False)
    priority = serializers.ChoiceField(choices=Priority.choices, required=False)
    requested_by = serializers.UUIDField(required=False)
    approval_stage = serializers.ChoiceField(choices=Stage.choices, required=False)
    brand_code = serializers.ChoiceField(choices=BrandCode.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'date_to must be on or after date_from'
            })
        return attrs


class PendingApprovalSerializer(serializers.Serializer):
    reimbursement_id = serializers.UUIDField()
    reimbursement_number = serializers.CharField()
    title = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    approval_stage = serializers.ChoiceField(choices=Stage.choices)
    requested_by_name = serializers.CharField()
    priority = serializers.CharField()
    created_at = serializers.DateTimeField()


class ReimbursementStatisticsSerializer(serializers.Serializer):
    total_reimbursements = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    approved_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_category = serializers.DictField(child=serializers.IntegerField())
    by_priority = serializers.DictField(child=serializers.IntegerField())
    pending_director1 = serializers.IntegerField()
    pending_director2 = serializers.IntegerField()
    pending_accountant = serializers.IntegerField()
    awaiting_payment = serializers.IntegerField()


class ReceiptUploadResponseSerializer(serializers.Serializer):
    urls = serializers.ListField(child=serializers.CharField())
