from rest_framework import serializers
from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice snapshot used as a refund source."""

    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'brand_code',
            'client_name',
            'client_email',
            'auction_name',
            'lot_number',
            'item_title',
            'hammer_price',
            'buyers_premium',
            'international_surcharge',
            'shipping_charge',
            'handling_charge',
            'insurance_charge',
            'total_amount',
            'currency',
            'status',
            'paid_at',
            'created_at',
        ]
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for invoice pickers."""

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'brand_code',
            'client_name',
            'auction_name',
            'lot_number',
            'item_title',
            'status',
        ]
        read_only_fields = fields
