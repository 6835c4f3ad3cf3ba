# ==========================================
# apps/refunds/admin.py
# ==========================================

from django.contrib import admin
from apps.refunds.models import Refund


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    """
    Read-only admin for refunds.

    Refunds are raised through the API so the amount is always derived;
    the admin only browses them.
    """

    list_display = [
        'refund_number',
        'brand_code',
        'type',
        'invoice',
        'amount',
        'refund_method',
        'status',
        'item_returned_by',
        'created_at',
    ]
    list_filter = [
        'brand_code',
        'type',
        'refund_method',
        'status',
        'created_at',
    ]
    search_fields = [
        'refund_number',
        'invoice__invoice_number',
        'invoice__client_name',
        'reason',
    ]
    list_select_related = ['invoice', 'item_returned_by']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
