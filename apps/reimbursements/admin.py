# ==========================================
# apps/reimbursements/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from apps.reimbursements.approval import ReimbursementStatus
from apps.reimbursements.models import Reimbursement


STATUS_COLOURS = {
    ReimbursementStatus.PENDING: '#E5C49A',
    ReimbursementStatus.DIRECTOR1_APPROVED: '#4A7BA7',
    ReimbursementStatus.DIRECTOR2_APPROVED: '#2F5D8A',
    ReimbursementStatus.FULLY_APPROVED: '#6B8E5E',
    ReimbursementStatus.PAID: '#3E6B3A',
    ReimbursementStatus.REJECTED: '#B85C5C',
}


@admin.register(Reimbursement)
class ReimbursementAdmin(admin.ModelAdmin):
    """
    Admin interface for reimbursements.

    Claim details are editable; the approval chain, status and derived
    amounts are shown read-only because they change only through the API.
    """

    list_display = [
        'reimbursement_number',
        'brand_code',
        'title',
        'requested_by',
        'total_amount',
        'status_badge',
        'priority',
        'created_at',
    ]
    list_filter = [
        'brand_code',
        'status',
        'category',
        'priority',
        'created_at',
    ]
    search_fields = [
        'reimbursement_number',
        'title',
        'vendor_name',
        'requested_by__email',
        'requested_by__display_name',
    ]
    list_select_related = ['requested_by']
    date_hierarchy = 'created_at'

    readonly_fields = [
        'reimbursement_number',
        'tax_amount',
        'net_amount',
        'status',
        'director1_approval_status',
        'director1_approved_by',
        'director1_approved_at',
        'director1_comments',
        'director2_approval_status',
        'director2_approved_by',
        'director2_approved_at',
        'director2_comments',
        'accountant_approval_status',
        'accountant_approved_by',
        'accountant_approved_at',
        'accountant_comments',
        'rejection_reason',
        'rejected_by',
        'rejected_at',
        'payment_reference',
        'payment_completed_at',
        'processed_by',
        'processed_at',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Request', {
            'fields': (
                'reimbursement_number', 'brand_code', 'title', 'description',
                'category', 'purpose', 'priority', 'requested_by',
            )
        }),
        ('Amounts', {
            'fields': ('total_amount', 'currency', 'tax_rate', 'tax_amount', 'net_amount')
        }),
        ('Payment & Receipts', {
            'fields': (
                'payment_method', 'payment_date', 'vendor_name', 'vendor_details',
                'receipt_urls', 'receipt_numbers', 'has_receipts',
            )
        }),
        ('Accounting', {
            'fields': (
                'department', 'project_code', 'cost_center', 'expected_payment_date',
                'internal_notes', 'accounting_notes',
            ),
            'classes': ('collapse',),
        }),
        ('Approval Chain', {
            'fields': (
                'status',
                ('director1_approval_status', 'director1_approved_by', 'director1_approved_at'),
                'director1_comments',
                ('director2_approval_status', 'director2_approved_by', 'director2_approved_at'),
                'director2_comments',
                ('accountant_approval_status', 'accountant_approved_by', 'accountant_approved_at'),
                'accountant_comments',
                ('rejection_reason', 'rejected_by', 'rejected_at'),
            )
        }),
        ('Payout', {
            'fields': ('payment_reference', 'payment_completed_at', 'processed_by', 'processed_at'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def status_badge(self, obj):
        """Display status as colored badge."""
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLOURS.get(obj.status, '#ccc'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
