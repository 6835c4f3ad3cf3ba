"""Refund creation service."""

import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction

from apps.finance.derivation import COST_FIELDS, derive_refund_amount
from apps.finance.exceptions import InvalidInputError
from apps.invoices.services import get_invoice_for_refund
from ..models import Refund
from .exceptions import (
    AmountMismatchError,
    InvalidRefundError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def create_refund(
    *,
    created_by,
    invoice_id,
    type: str,
    reason: str,
    refund_method: str,
    amount: Optional[Decimal] = None,
    brand_code: Optional[str] = None,
    item_returned_by=None,
    internal_notes: str = '',
    client_notes: str = '',
    **costs
) -> Refund:
    """
    Create a refund against a paid invoice.

    The amount is re-derived from type and cost components. If the caller
    also sent the amount it previewed, the two must agree exactly.

    Args:
        created_by: Staff member raising the refund
        invoice_id: Source invoice id (must be paid)
        type: RefundType value
        reason: Non-empty free text
        refund_method: RefundMethod value
        amount: Client-derived amount to verify, optional
        brand_code: Defaults to the invoice's brand
        item_returned_by: Staff member who received the item, optional
        internal_notes: Notes for staff
        client_notes: Notes shown to the client
        **costs: Cost components keyed by COST_FIELDS; missing ones are 0

    Returns:
        The created Refund

    Raises:
        InvoiceNotFoundError: If the invoice does not exist
        InvoiceNotRefundableError: If the invoice is not paid
        InvalidRefundError: If the reason is blank or a cost is invalid
        AmountMismatchError: If the submitted amount differs from the derived one
    """
    unknown = set(costs) - set(COST_FIELDS)
    if unknown:
        raise InvalidRefundError(f"Unknown cost fields: {', '.join(sorted(unknown))}")

    if not reason or not reason.strip():
        raise InvalidRefundError("A refund reason is required")

    # Lock the invoice so concurrent refunds against it are serialized
    invoice = get_invoice_for_refund(invoice_id=invoice_id, lock=True)

    try:
        derived = derive_refund_amount(type, costs)
    except InvalidInputError as e:
        raise InvalidRefundError(str(e))

    if amount is not None and Decimal(amount) != derived:
        logger.warning(
            "Refund against %s rejected: submitted %s, derived %s",
            invoice.invoice_number, amount, derived,
        )
        raise AmountMismatchError(submitted=amount, derived=derived)

    refund = Refund.objects.create(
        brand_code=brand_code or invoice.brand_code,
        type=type,
        invoice=invoice,
        reason=reason.strip(),
        refund_method=refund_method,
        item_returned_by=item_returned_by,
        internal_notes=internal_notes,
        client_notes=client_notes,
        created_by=created_by,
        **costs
    )

    logger.info(
        "Refund %s created against %s for %s (%s)",
        refund.refund_number, invoice.invoice_number, refund.amount, refund.type,
    )
    return refund

