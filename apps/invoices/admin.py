# ==========================================
# apps/invoices/admin.py
# ==========================================

from django.contrib import admin
from apps.invoices.models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """Admin interface for invoices."""

    list_display = [
        'invoice_number',
        'brand_code',
        'client_name',
        'auction_name',
        'lot_number',
        'hammer_price',
        'status',
        'paid_at',
    ]
    list_filter = [
        'brand_code',
        'status',
        'auction_name',
    ]
    search_fields = [
        'invoice_number',
        'client_name',
        'client_email',
        'lot_number',
        'item_title',
    ]
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Invoice', {
            'fields': ('invoice_number', 'brand_code', 'status', 'paid_at')
        }),
        ('Sale', {
            'fields': ('client_name', 'client_email', 'auction_name', 'lot_number', 'item_title')
        }),
        ('Charges', {
            'fields': (
                'hammer_price',
                'buyers_premium',
                'international_surcharge',
                'shipping_charge',
                'handling_charge',
                'insurance_charge',
                'currency',
            )
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
