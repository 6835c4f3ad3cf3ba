"""
Client-side reimbursement form state and approval actions.

ReimbursementDraft builds a new request and keeps tax and net amounts as
computed properties. ApprovalDesk drives the three sign-offs and payment
completion for existing records. Both talk to the API only through a
gateway (normally apps.finance.client.BackOfficeClient).
"""

import datetime
import logging
import threading
from decimal import Decimal
from typing import Optional

from django.db import models

from apps.finance.derivation import (
    DEFAULT_TAX_RATE,
    MONEY_PLACES,
    ZERO,
    TaxBreakdown,
    derive_tax,
    parse_amount,
    parse_tax_rate,
)
from apps.finance.exceptions import (
    ActionInFlightError,
    AlreadySubmittedError,
    InvalidInputError,
    MissingRequiredFieldsError,
    TransitionRejectedError,
    ValidationError,
)
from .approval import (
    Action,
    ApprovalState,
    Stage,
    STAGE_ACTIONS,
    available_actions,
    ensure_can_complete_payment,
    ensure_can_decide,
)
from .models import Category, PaymentMethod, Priority

logger = logging.getLogger(__name__)


class ReimbursementField(models.TextChoices):
    """Every editable field of the reimbursement form."""
    TITLE = 'title', 'Title'
    DESCRIPTION = 'description', 'Description'
    CATEGORY = 'category', 'Category'
    PURPOSE = 'purpose', 'Purpose'
    PRIORITY = 'priority', 'Priority'
    TOTAL_AMOUNT = 'total_amount', 'Total Amount'
    TAX_RATE = 'tax_rate', 'Tax Rate'
    CURRENCY = 'currency', 'Currency'
    PAYMENT_METHOD = 'payment_method', 'Payment Method'
    PAYMENT_DATE = 'payment_date', 'Payment Date'
    VENDOR_NAME = 'vendor_name', 'Vendor Name'
    VENDOR_DETAILS = 'vendor_details', 'Vendor Details'
    RECEIPT_NUMBERS = 'receipt_numbers', 'Receipt Numbers'
    DEPARTMENT = 'department', 'Department'
    PROJECT_CODE = 'project_code', 'Project Code'
    COST_CENTER = 'cost_center', 'Cost Center'
    INTERNAL_NOTES = 'internal_notes', 'Internal Notes'
    REQUESTED_BY = 'requested_by', 'Requested By'


# Submission order of the required-field check
REQUIRED_FIELDS = (
    ReimbursementField.TITLE,
    ReimbursementField.DESCRIPTION,
    ReimbursementField.TOTAL_AMOUNT,
    ReimbursementField.CATEGORY,
    ReimbursementField.PAYMENT_METHOD,
    ReimbursementField.PAYMENT_DATE,
    ReimbursementField.PURPOSE,
    ReimbursementField.REQUESTED_BY,
)

CHOICE_FIELDS = {
    ReimbursementField.CATEGORY: Category,
    ReimbursementField.PAYMENT_METHOD: PaymentMethod,
    ReimbursementField.PRIORITY: Priority,
}


class ReimbursementDraft:
    """
    Reimbursement request being composed.

    Args:
        gateway: Object exposing create_reimbursement() and upload_receipts()
        brand_code: Brand the request is raised under
        tax_rate: Starting tax rate, 0.20 unless given
    """

    def __init__(self, gateway, *, brand_code: str, tax_rate=DEFAULT_TAX_RATE):
        self.gateway = gateway
        self.brand_code = brand_code
        self.title = ''
        self.description = ''
        self.category: Optional[str] = None
        self.purpose = ''
        self.priority = Priority.NORMAL
        self.total_amount = ZERO
        self.tax_rate = parse_tax_rate(tax_rate)
        self.currency = 'GBP'
        self.payment_method: Optional[str] = None
        self.payment_date: Optional[datetime.date] = None
        self.vendor_name = ''
        self.vendor_details = ''
        self.receipt_numbers = ''
        self.department = ''
        self.project_code = ''
        self.cost_center = ''
        self.internal_notes = ''
        self.requested_by = None
        self.receipts = []
        self.submitted: Optional[dict] = None

    @property
    def is_submitted(self):
        return self.submitted is not None

    @property
    def breakdown(self) -> TaxBreakdown:
        return derive_tax(self.total_amount, self.tax_rate)

    @property
    def tax_amount(self) -> Decimal:
        return self.breakdown.tax_amount

    @property
    def net_amount(self) -> Decimal:
        return self.breakdown.net_amount

    @property
    def has_receipts(self):
        return bool(self.receipts)

    def _ensure_editable(self):
        if self.is_submitted:
            raise AlreadySubmittedError()

    def update_amount_or_rate(self, field, value) -> TaxBreakdown:
        """
        Set total_amount or tax_rate and return the re-derived breakdown.

        Raises:
            InvalidInputError: If the value is not a valid amount or rate
        """
        self._ensure_editable()
        if field == ReimbursementField.TOTAL_AMOUNT:
            self.total_amount = parse_amount(value, field='total_amount', places=MONEY_PLACES)
        elif field == ReimbursementField.TAX_RATE:
            self.tax_rate = parse_tax_rate(value)
        else:
            raise InvalidInputError(f"{field!r} is not an amount or rate field", field=str(field))
        return self.breakdown

    def set_payment_date(self, value):
        self._ensure_editable()
        if value in (None, ''):
            self.payment_date = None
        elif isinstance(value, datetime.date):
            self.payment_date = value
        else:
            try:
                self.payment_date = datetime.date.fromisoformat(str(value))
            except ValueError:
                raise InvalidInputError(
                    f"payment_date must be an ISO date, got {value!r}", field='payment_date'
                )

    def update(self, field, value):
        """Set any form field by name."""
        if field not in ReimbursementField.values:
            raise InvalidInputError(f"Unknown reimbursement field: {field!r}", field=str(field))
        field = ReimbursementField(field)

        if field in (ReimbursementField.TOTAL_AMOUNT, ReimbursementField.TAX_RATE):
            self.update_amount_or_rate(field, value)
            return
        if field == ReimbursementField.PAYMENT_DATE:
            self.set_payment_date(value)
            return

        self._ensure_editable()
        choices = CHOICE_FIELDS.get(field)
        if choices is not None:
            if value not in choices.values:
                raise ValidationError(f"Unknown {field.label.lower()}: {value!r}", field=field.value)
            value = choices(value)
        elif field != ReimbursementField.REQUESTED_BY and value is None:
            value = ''
        setattr(self, field.value, value)

    def attach_receipt(self, name: str, content, content_type: str):
        """Queue a receipt file for upload at submit time."""
        self._ensure_editable()
        self.receipts.append((name, content, content_type))

    def missing_fields(self) -> list:
        missing = []
        for field in REQUIRED_FIELDS:
            value = getattr(self, field.value)
            if field == ReimbursementField.TOTAL_AMOUNT:
                if value is None or value <= ZERO:
                    missing.append(field.value)
            elif isinstance(value, str):
                if not value.strip():
                    missing.append(field.value)
            elif value is None:
                missing.append(field.value)
        return missing

    def to_payload(self, receipt_urls=None) -> dict:
        breakdown = self.breakdown
        return {
            'brand_code': self.brand_code,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'purpose': self.purpose,
            'priority': self.priority,
            'total_amount': str(breakdown.total_amount),
            'currency': self.currency,
            'tax_rate': str(breakdown.tax_rate),
            'tax_amount': str(breakdown.tax_amount),
            'net_amount': str(breakdown.net_amount),
            'payment_method': self.payment_method,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'vendor_name': self.vendor_name,
            'vendor_details': self.vendor_details,
            'receipt_numbers': self.receipt_numbers,
            'receipt_urls': list(receipt_urls or []),
            'has_receipts': bool(receipt_urls),
            'department': self.department,
            'project_code': self.project_code,
            'cost_center': self.cost_center,
            'internal_notes': self.internal_notes,
            'requested_by': str(self.requested_by) if self.requested_by else None,
        }

    def submit(self) -> dict:
        """
        Validate, upload receipts and send the request.

        Returns:
            The created reimbursement as returned by the server

        Raises:
            AlreadySubmittedError: If this draft was already submitted
            MissingRequiredFieldsError: Listing every required field left unset
            ApiError: If the server rejects the upload or the request
        """
        self._ensure_editable()

        missing = self.missing_fields()
        if missing:
            raise MissingRequiredFieldsError(missing)

        receipt_urls = []
        if self.receipts:
            logger.info("Uploading %d receipt(s) for %r", len(self.receipts), self.title)
            receipt_urls = self.gateway.upload_receipts(self.receipts)

        payload = self.to_payload(receipt_urls)
        logger.info("Submitting reimbursement %r for %s (tax %s, net %s)",
                    self.title, payload['total_amount'], payload['tax_amount'], payload['net_amount'])
        record = self.gateway.create_reimbursement(payload)
        self.submitted = record
        return record


class ApprovalDesk:
    """
    Approval actions on existing reimbursements.

    Legality is checked locally before any request is made. The record
    returned by each method is the server's, never a locally patched copy.
    Only one action per reimbursement may be in flight at a time.

    Args:
        gateway: Object exposing decide(), complete_payment() and
            get_reimbursement()
    """

    def __init__(self, gateway):
        self.gateway = gateway
        self._lock = threading.Lock()
        self._in_flight = set()

    def is_in_flight(self, record) -> bool:
        with self._lock:
            return str(record['id']) in self._in_flight

    def available_actions(self, record) -> list:
        """Legal actions for the record; empty while one is in flight."""
        if self.is_in_flight(record):
            return []
        return available_actions(ApprovalState.from_record(record))

    def _begin(self, key):
        with self._lock:
            if key in self._in_flight:
                raise ActionInFlightError(f"An action on reimbursement {key} is already in progress")
            self._in_flight.add(key)

    def _end(self, key):
        with self._lock:
            self._in_flight.discard(key)

    def _run(self, record, call):
        key = str(record['id'])
        self._begin(key)
        try:
            return call()
        except TransitionRejectedError as e:
            logger.warning("Server rejected action on reimbursement %s: %s", key, e)
            try:
                e.current = self.gateway.get_reimbursement(record['id'])
            except Exception:
                logger.exception("Could not refetch reimbursement %s after rejection", key)
            raise
        finally:
            self._end(key)

    def _decide(self, record, stage, *, approved, comments,
                rejection_reason=None, payment_reference=None):
        stage = Stage(stage)
        if not (comments or '').strip():
            raise ValidationError("Comments are required for every decision", field='comments')
        if not approved and not (rejection_reason or '').strip():
            raise ValidationError("A rejection reason is required", field='rejection_reason')
        ensure_can_decide(ApprovalState.from_record(record), stage)

        action = STAGE_ACTIONS[stage]
        return self._run(record, lambda: self.gateway.decide(
            record['id'],
            action.value,
            approved=approved,
            comments=comments,
            rejection_reason=rejection_reason,
            payment_reference=payment_reference,
        ))

    def approve_director1(self, record, comments: str) -> dict:
        return self._decide(record, Stage.DIRECTOR1, approved=True, comments=comments)

    def approve_director2(self, record, comments: str) -> dict:
        return self._decide(record, Stage.DIRECTOR2, approved=True, comments=comments)

    def approve_accountant(self, record, comments: str,
                           payment_reference: Optional[str] = None) -> dict:
        return self._decide(
            record, Stage.ACCOUNTANT, approved=True, comments=comments,
            payment_reference=payment_reference,
        )

    def reject(self, record, stage, comments: str, rejection_reason: str) -> dict:
        """
        Reject the reimbursement at `stage`.

        Raises:
            ValidationError: If comments or rejection_reason are blank
            IllegalTransitionError: If the stage may not decide now
            TransitionRejectedError: If the server refuses; `current` holds
                the refetched record
        """
        return self._decide(
            record, stage, approved=False, comments=comments,
            rejection_reason=rejection_reason,
        )

    def complete_payment(self, record, payment_reference: str, comments: Optional[str] = None) -> dict:
        if not (payment_reference or '').strip():
            raise ValidationError("A payment reference is required", field='payment_reference')
        ensure_can_complete_payment(ApprovalState.from_record(record))

        return self._run(record, lambda: self.gateway.complete_payment(
            record['id'],
            payment_reference=payment_reference,
            comments=comments,
        ))

    def perform(self, record, action, **kwargs) -> dict:
        """Dispatch by Action slug, as a button handler would."""
        action = Action(action)
        if action == Action.COMPLETE_PAYMENT:
            return self.complete_payment(record, **kwargs)
        handlers = {
            Action.APPROVE_DIRECTOR1: self.approve_director1,
            Action.APPROVE_DIRECTOR2: self.approve_director2,
            Action.APPROVE_ACCOUNTANT: self.approve_accountant,
        }
        return handlers[action](record, **kwargs)
