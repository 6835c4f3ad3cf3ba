from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal

from apps.accounts.models import BrandCode


class InvoiceStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PAID = 'paid', 'Paid'
    CANCELLED = 'cancelled', 'Cancelled'


def money_field(**kwargs):
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        **kwargs
    )


class Invoice(models.Model):
    """
    Buyer invoice for a sold lot.

    Invoices are imported from the sale records and only read here; a paid
    invoice is the snapshot a refund is raised against.
    """

    invoice_number = models.CharField(max_length=50, unique=True)
    brand_code = models.CharField(
        max_length=10,
        choices=BrandCode.choices,
        default=BrandCode.MSABER,
        db_index=True
    )

    # Sale context
    client_name = models.CharField(max_length=200)
    client_email = models.EmailField(blank=True)
    auction_name = models.CharField(max_length=200, blank=True)
    lot_number = models.CharField(max_length=20, blank=True)
    item_title = models.CharField(max_length=300, blank=True)

    # Charges
    hammer_price = money_field()
    buyers_premium = money_field()
    international_surcharge = money_field()
    shipping_charge = money_field()
    handling_charge = money_field()
    insurance_charge = money_field()
    currency = models.CharField(max_length=3, default='GBP')

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.UNPAID
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['brand_code', 'status'], name='invoices_brand_status_idx'),
            models.Index(fields=['auction_name'], name='invoices_auction_idx'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.client_name}"

    @property
    def total_amount(self):
        return (
            self.hammer_price
            + self.buyers_premium
            + self.international_surcharge
            + self.shipping_charge
            + self.handling_charge
            + self.insurance_charge
        )

    @property
    def is_refundable(self):
        return self.status == InvoiceStatus.PAID
