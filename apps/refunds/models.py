from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import secrets
import uuid

from apps.accounts.models import BrandCode
from apps.finance.derivation import COST_FIELDS, RefundType, derive_refund_amount
from .lifecycle import RefundStatus, available_actions, ensure_can_transition


class RefundMethod(models.TextChoices):
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    CREDIT_CARD = 'credit_card', 'Credit Card'
    CHEQUE = 'cheque', 'Cheque'
    CASH = 'cash', 'Cash'
    STORE_CREDIT = 'store_credit', 'Store Credit'


def cost_field():
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )


class Refund(models.Model):
    """
    Refund raised against a paid invoice.

    The amount is never set directly: save() re-derives it from the type and
    the cost components, so a stored refund always agrees with its inputs.
    The content is immutable once created; only the status moves, through
    approve(), record_processing() and cancel().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    refund_number = models.CharField(max_length=32, unique=True, editable=False)
    brand_code = models.CharField(
        max_length=10,
        choices=BrandCode.choices,
        default=BrandCode.MSABER,
        db_index=True
    )

    type = models.CharField(max_length=40, choices=RefundType.choices)
    invoice = models.ForeignKey(
        'invoices.Invoice',
        on_delete=models.PROTECT,
        related_name='refunds'
    )
    reason = models.TextField()

    amount = models.DecimalField(max_digits=12, decimal_places=2, editable=False)
    refund_method = models.CharField(max_length=20, choices=RefundMethod.choices)

    # Cost components (snapshot from the invoice, adjustable before submit)
    hammer_price = cost_field()
    buyers_premium = cost_field()
    international_shipping_cost = cost_field()
    local_shipping_cost = cost_field()
    handling_insurance_cost = cost_field()

    item_returned_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refunds_returned'
    )
    internal_notes = models.TextField(blank=True)
    client_notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=RefundStatus.choices,
        default=RefundStatus.PENDING,
        editable=False,
        db_index=True
    )
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refunds_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approval_comments = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refunds_processed'
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    refund_date = models.DateField(null=True, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True)
    cancelled_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refunds_cancelled'
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='refunds_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'refunds'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['brand_code', 'type'], name='refunds_brand_type_idx'),
            models.Index(fields=['refund_number'], name='refunds_number_idx'),
            models.Index(fields=['brand_code', 'status'], name='refunds_brand_status_idx'),
        ]

    def __str__(self):
        return f"{self.refund_number} ({self.get_type_display()}) {self.amount}"

    @property
    def is_complete(self):
        """A refund is complete once the returned item has been signed for."""
        return self.item_returned_by_id is not None

    def cost_components(self):
        return {name: getattr(self, name) for name in COST_FIELDS}

    def derive_amount(self):
        return derive_refund_amount(self.type, self.cost_components())

    def save(self, *args, **kwargs):
        """Assign a refund number and re-derive the amount."""
        if not self.refund_number:
            self.refund_number = self._generate_refund_number()
        self.amount = self.derive_amount()
        super().save(*args, **kwargs)

    def _generate_refund_number(self):
        """Format: RF-<brand>-<yymmdd>-<5-digit-random>."""
        stamp = timezone.now().strftime('%y%m%d')
        return f"RF-{self.brand_code}-{stamp}-{secrets.randbelow(100000):05d}"

    @property
    def available_actions(self):
        return [action.value for action in available_actions(self.status)]

    def approve(self, *, actor, comments=''):
        """
        Approve a pending refund.

        Raises:
            IllegalTransitionError: Unless the refund is pending
        """
        ensure_can_transition(self.status, RefundStatus.APPROVED)
        self.status = RefundStatus.APPROVED
        self.approved_by = actor
        self.approved_at = timezone.now()
        self.approval_comments = comments
        self.save(update_fields=['status', 'approved_by', 'approved_at', 'approval_comments'])

    def record_processing(self, *, actor, status, refund_date=None, payment_reference=''):
        """
        Move an approved refund to processing, completed or failed.

        A completed refund without an explicit refund_date is dated today.

        Raises:
            IllegalTransitionError: If the refund may not move to `status`
        """
        ensure_can_transition(self.status, status)
        self.status = RefundStatus(status)
        self.processed_by = actor
        self.processed_at = timezone.now()
        fields = ['status', 'processed_by', 'processed_at']

        if refund_date is None and self.status == RefundStatus.COMPLETED:
            refund_date = timezone.localdate()
        if refund_date is not None:
            self.refund_date = refund_date
            fields.append('refund_date')
        if payment_reference:
            self.payment_reference = payment_reference
            fields.append('payment_reference')

        self.save(update_fields=fields)

    def cancel(self, *, actor, reason):
        """
        Cancel a refund that has not been processed yet.

        Raises:
            IllegalTransitionError: Unless the refund is pending or approved
        """
        ensure_can_transition(self.status, RefundStatus.CANCELLED)
        self.status = RefundStatus.CANCELLED
        self.cancelled_by = actor
        self.cancelled_at = timezone.now()
        self.cancellation_reason = reason
        self.save(update_fields=['status', 'cancelled_by', 'cancelled_at', 'cancellation_reason'])
