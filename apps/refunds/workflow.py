"""
Client-side refund form state.

A RefundDraft holds what the user has typed so far and talks to the API
only through a gateway (normally apps.finance.client.BackOfficeClient).
The amount is a computed property, so there is never a stale value to
submit.
"""

import logging
from decimal import Decimal
from typing import Optional

from django.db import models

from apps.finance.derivation import (
    COST_FIELDS,
    MONEY_PLACES,
    ZERO,
    CostField,
    RefundType,
    derive_refund_amount,
    parse_amount,
)
from apps.finance.exceptions import (
    AlreadySubmittedError,
    InvalidInputError,
    MissingInvoiceError,
    MissingReasonError,
    ValidationError,
)
from .models import RefundMethod

logger = logging.getLogger(__name__)


class RefundField(models.TextChoices):
    """Every editable field of the refund form."""
    TYPE = 'type', 'Type'
    REASON = 'reason', 'Reason'
    REFUND_METHOD = 'refund_method', 'Refund Method'
    ITEM_RETURNED_BY = 'item_returned_by', 'Item Returned By'
    INTERNAL_NOTES = 'internal_notes', 'Internal Notes'
    CLIENT_NOTES = 'client_notes', 'Client Notes'
    HAMMER_PRICE = 'hammer_price', 'Hammer Price'
    BUYERS_PREMIUM = 'buyers_premium', "Buyer's Premium"
    INTERNATIONAL_SHIPPING_COST = 'international_shipping_cost', 'International Shipping Cost'
    LOCAL_SHIPPING_COST = 'local_shipping_cost', 'Local Shipping Cost'
    HANDLING_INSURANCE_COST = 'handling_insurance_cost', 'Handling & Insurance Cost'


class RefundDraft:
    """
    Refund being composed against one invoice.

    Args:
        gateway: Object exposing get_invoice() and create_refund()
        brand_code: Brand the refund is raised under
    """

    def __init__(self, gateway, *, brand_code: str):
        self.gateway = gateway
        self.brand_code = brand_code
        self.invoice: Optional[dict] = None
        self.type = RefundType.ARTWORK
        self.reason = ''
        self.refund_method: Optional[str] = None
        self.item_returned_by = None
        self.internal_notes = ''
        self.client_notes = ''
        self.costs = {name: ZERO for name in COST_FIELDS}
        self.submitted: Optional[dict] = None

    @property
    def is_submitted(self):
        return self.submitted is not None

    @property
    def amount(self) -> Decimal:
        return derive_refund_amount(self.type, self.costs)

    def _ensure_editable(self):
        if self.is_submitted:
            raise AlreadySubmittedError()

    def select_invoice(self, invoice_id) -> dict:
        """Load an invoice and copy its charges into the cost components."""
        self._ensure_editable()
        invoice = self.gateway.get_invoice(invoice_id)

        def charge(key):
            return parse_amount(invoice.get(key), field=key, places=MONEY_PLACES)

        self.costs = {
            'hammer_price': charge('hammer_price'),
            'buyers_premium': charge('buyers_premium'),
            'international_shipping_cost': charge('international_surcharge'),
            'local_shipping_cost': charge('shipping_charge'),
            'handling_insurance_cost': charge('handling_charge') + charge('insurance_charge'),
        }
        self.invoice = invoice
        return invoice

    def set_type(self, refund_type):
        self._ensure_editable()
        if refund_type not in RefundType.values:
            raise InvalidInputError(f"Unknown refund type: {refund_type!r}", field='type')
        self.type = RefundType(refund_type)

    def set_cost(self, field, value):
        self._ensure_editable()
        if field not in COST_FIELDS:
            raise InvalidInputError(f"{field!r} is not a cost field", field=str(field))
        name = CostField(field).value
        self.costs[name] = parse_amount(value, field=name, places=MONEY_PLACES)

    def set_refund_method(self, method):
        self._ensure_editable()
        if method not in RefundMethod.values:
            raise ValidationError(f"Unknown refund method: {method!r}", field='refund_method')
        self.refund_method = RefundMethod(method)

    def update(self, field, value):
        """Set any form field by name."""
        if field not in RefundField.values:
            raise InvalidInputError(f"Unknown refund field: {field!r}", field=str(field))
        field = RefundField(field)

        if field == RefundField.TYPE:
            self.set_type(value)
        elif field == RefundField.REFUND_METHOD:
            self.set_refund_method(value)
        elif field in COST_FIELDS:
            self.set_cost(field.value, value)
        else:
            self._ensure_editable()
            setattr(self, field.value, value if value is not None else '')

    def to_payload(self) -> dict:
        payload = {
            'invoice': self.invoice['id'] if self.invoice else None,
            'brand_code': self.brand_code,
            'type': self.type.value,
            'reason': self.reason,
            'refund_method': self.refund_method.value if self.refund_method else None,
            'amount': str(self.amount),
            'internal_notes': self.internal_notes,
            'client_notes': self.client_notes,
            'item_returned_by': self.item_returned_by or None,
        }
        payload.update({name: str(value) for name, value in self.costs.items()})
        return payload

    def submit(self) -> dict:
        """
        Validate and send the refund.

        Returns:
            The created refund as returned by the server

        Raises:
            AlreadySubmittedError: If this draft was already submitted
            MissingInvoiceError: If no invoice is selected
            MissingReasonError: If the reason is blank
            InvalidInputError: If the amount cannot be derived
            ValidationError: If no refund method is chosen
            ApiError: If the server rejects the refund
        """
        self._ensure_editable()

        if self.invoice is None:
            raise MissingInvoiceError()
        if not (self.reason or '').strip():
            raise MissingReasonError()
        amount = self.amount
        if self.refund_method is None:
            raise ValidationError("A refund method is required", field='refund_method')

        logger.info("Submitting %s refund of %s against invoice %s",
                    self.type, amount, self.invoice.get('invoice_number', self.invoice['id']))
        record = self.gateway.create_refund(self.to_payload())
        self.submitted = record
        return record
