from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
from decimal import Decimal
import secrets
import uuid

from apps.accounts.models import BrandCode
from apps.finance.derivation import derive_tax
from .approval import (
    ApprovalState,
    ApprovalStatus,
    ReimbursementStatus,
    Stage,
)


class Category(models.TextChoices):
    FOOD = 'food', 'Food'
    FUEL = 'fuel', 'Fuel'
    INTERNAL_LOGISTICS = 'internal_logistics', 'Internal Logistics'
    INTERNATIONAL_LOGISTICS = 'international_logistics', 'International Logistics'
    STATIONARY = 'stationary', 'Stationary'
    TRAVEL = 'travel', 'Travel'
    ACCOMMODATION = 'accommodation', 'Accommodation'
    OTHER = 'other', 'Other'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    CARD = 'card', 'Card'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    OTHER = 'other', 'Other'


class Priority(models.TextChoices):
    LOW = 'low', 'Low'
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


def default_tax_rate():
    return settings.REIMBURSEMENT_DEFAULT_TAX_RATE


def default_currency():
    return settings.DEFAULT_CURRENCY


def money_field(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


def approval_status_field():
    return models.CharField(
        max_length=10,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        editable=False
    )


def approver_field(stage):
    return models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        editable=False,
        related_name=f'{stage}_reimbursement_decisions'
    )


class Reimbursement(models.Model):
    """
    Staff expense claim with three sequential sign-offs.

    `status`, `tax_amount` and `net_amount` are recomputed in save() from
    the sub-approvals and from total/rate, so they can never drift from
    their inputs. Sub-approvals change only through record_decision() and
    complete_payment().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reimbursement_number = models.CharField(max_length=32, unique=True, editable=False)
    brand_code = models.CharField(
        max_length=10,
        choices=BrandCode.choices,
        default=BrandCode.MSABER,
        db_index=True
    )

    # Claim
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=30, choices=Category.choices)
    purpose = models.TextField()
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)

    # Money
    total_amount = money_field(validators=[MinValueValidator(Decimal('0.01'))])
    currency = models.CharField(max_length=3, default=default_currency)
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=default_tax_rate,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))]
    )
    tax_amount = money_field(editable=False, default=Decimal('0.00'))
    net_amount = money_field(editable=False, default=Decimal('0.00'))

    # Payment made by the claimant
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_date = models.DateField()
    vendor_name = models.CharField(max_length=200, blank=True)
    vendor_details = models.TextField(blank=True)

    # Receipts
    receipt_urls = models.JSONField(default=list, blank=True)
    receipt_numbers = models.CharField(max_length=200, blank=True)
    has_receipts = models.BooleanField(default=False)

    # Accounting
    department = models.CharField(max_length=100, blank=True)
    project_code = models.CharField(max_length=50, blank=True)
    cost_center = models.CharField(max_length=50, blank=True)
    expected_payment_date = models.DateField(null=True, blank=True)
    internal_notes = models.TextField(blank=True)
    accounting_notes = models.TextField(blank=True)

    requested_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='reimbursements_requested'
    )

    # Approval chain
    status = models.CharField(
        max_length=20,
        choices=ReimbursementStatus.choices,
        default=ReimbursementStatus.PENDING,
        editable=False,
        db_index=True
    )

    director1_approval_status = approval_status_field()
    director1_approved_by = approver_field('director1')
    director1_approved_at = models.DateTimeField(null=True, blank=True, editable=False)
    director1_comments = models.TextField(blank=True, editable=False)

    director2_approval_status = approval_status_field()
    director2_approved_by = approver_field('director2')
    director2_approved_at = models.DateTimeField(null=True, blank=True, editable=False)
    director2_comments = models.TextField(blank=True, editable=False)

    accountant_approval_status = approval_status_field()
    accountant_approved_by = approver_field('accountant')
    accountant_approved_at = models.DateTimeField(null=True, blank=True, editable=False)
    accountant_comments = models.TextField(blank=True, editable=False)

    rejection_reason = models.TextField(blank=True, editable=False)
    rejected_by = approver_field('rejected')
    rejected_at = models.DateTimeField(null=True, blank=True, editable=False)

    # Payout
    payment_reference = models.CharField(max_length=100, blank=True, editable=False)
    payment_completed_at = models.DateTimeField(null=True, blank=True, editable=False)
    processed_by = approver_field('processed')
    processed_at = models.DateTimeField(null=True, blank=True, editable=False)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='reimbursements_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reimbursements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['brand_code', 'status'], name='reimb_brand_status_idx'),
            models.Index(fields=['requested_by', 'status'], name='reimb_requester_status_idx'),
        ]

    def __str__(self):
        return f"{self.reimbursement_number} {self.title} ({self.status})"

    @property
    def approval_state(self) -> ApprovalState:
        return ApprovalState.from_record(self)

    def save(self, *args, **kwargs):
        """Assign a number, derive tax/net and project the status."""
        if not self.reimbursement_number:
            self.reimbursement_number = self._generate_reimbursement_number()

        breakdown = derive_tax(self.total_amount, self.tax_rate)
        self.tax_amount = breakdown.tax_amount
        self.net_amount = breakdown.net_amount
        self.status = self.approval_state.status

        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {
                'status', 'tax_amount', 'net_amount', 'updated_at'
            }
        super().save(*args, **kwargs)

    def _generate_reimbursement_number(self):
        """Format: RB-<brand>-<yymmdd>-<5-digit-random>."""
        stamp = timezone.now().strftime('%y%m%d')
        return f"RB-{self.brand_code}-{stamp}-{secrets.randbelow(100000):05d}"

    def record_decision(self, *, stage, approved, actor, comments,
                        rejection_reason='', payment_reference=''):
        """
        Record one stage's decision and save.

        Raises:
            IllegalTransitionError: If the stage may not decide now
        """
        stage = Stage(stage)
        new_state = self.approval_state.with_decision(stage, approved)
        now = timezone.now()

        setattr(self, f'{stage.value}_approval_status', new_state.get(stage))
        setattr(self, f'{stage.value}_approved_by', actor)
        setattr(self, f'{stage.value}_approved_at', now)
        setattr(self, f'{stage.value}_comments', comments)
        fields = [f'{stage.value}_{suffix}' for suffix in
                  ('approval_status', 'approved_by', 'approved_at', 'comments')]

        if not approved:
            self.rejection_reason = rejection_reason
            self.rejected_by = actor
            self.rejected_at = now
            fields += ['rejection_reason', 'rejected_by', 'rejected_at']
        elif stage == Stage.ACCOUNTANT and payment_reference:
            self.payment_reference = payment_reference
            fields.append('payment_reference')

        self.save(update_fields=fields)

    def complete_payment(self, *, actor, payment_reference, comments=''):
        """
        Mark a fully approved reimbursement as paid.

        Raises:
            IllegalTransitionError: Unless the reimbursement is fully approved
        """
        self.approval_state.with_payment()
        now = timezone.now()

        self.payment_reference = payment_reference
        self.payment_completed_at = now
        self.processed_by = actor
        self.processed_at = now
        fields = ['payment_reference', 'payment_completed_at', 'processed_by', 'processed_at']
        if comments:
            self.accounting_notes = '\n'.join(filter(None, [self.accounting_notes, comments]))
            fields.append('accounting_notes')

        self.save(update_fields=fields)

