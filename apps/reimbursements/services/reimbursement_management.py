"""Reimbursement creation service."""

import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction

from apps.finance.derivation import derive_tax
from apps.finance.exceptions import InvalidInputError
from ..models import Reimbursement
from .exceptions import AmountMismatchError, InvalidReimbursementError

logger = logging.getLogger(__name__)


@transaction.atomic
def create_reimbursement(
    *,
    created_by,
    total_amount: Decimal,
    requested_by=None,
    tax_rate: Optional[Decimal] = None,
    tax_amount: Optional[Decimal] = None,
    net_amount: Optional[Decimal] = None,
    receipt_urls: Optional[list] = None,
    **fields
) -> Reimbursement:
    """
    Create a pending reimbursement request.

    Tax and net are derived from total and rate. Values the client
    previewed may be sent along and must match the derived ones exactly.

    Args:
        created_by: Staff member submitting the form
        total_amount: Gross amount, must be positive
        requested_by: Claimant; defaults to created_by
        tax_rate: Fraction in [0, 1]; defaults to REIMBURSEMENT_DEFAULT_TAX_RATE
        tax_amount: Client-derived tax to verify, optional
        net_amount: Client-derived net to verify, optional
        receipt_urls: URLs returned by the receipt upload endpoint
        **fields: Remaining Reimbursement fields (title, category, ...)

    Returns:
        The created Reimbursement

    Raises:
        InvalidReimbursementError: If the total or rate is invalid
        AmountMismatchError: If tax_amount or net_amount disagree with the derivation
    """
    if tax_rate is None:
        tax_rate = settings.REIMBURSEMENT_DEFAULT_TAX_RATE

    try:
        breakdown = derive_tax(total_amount, tax_rate)
    except InvalidInputError as e:
        raise InvalidReimbursementError(str(e))

    if breakdown.total_amount <= 0:
        raise InvalidReimbursementError("total_amount must be greater than zero")

    for name, submitted in (('tax_amount', tax_amount), ('net_amount', net_amount)):
        derived = getattr(breakdown, name)
        if submitted is not None and Decimal(submitted) != derived:
            raise AmountMismatchError(
                f"Submitted {name} {submitted} does not match derived {name} {derived}"
            )

    receipt_urls = list(receipt_urls or [])
    fields.setdefault('has_receipts', bool(receipt_urls))

    reimbursement = Reimbursement.objects.create(
        created_by=created_by,
        requested_by=requested_by or created_by,
        total_amount=breakdown.total_amount,
        tax_rate=breakdown.tax_rate,
        receipt_urls=receipt_urls,
        **fields
    )

    logger.info(
        "Reimbursement %s created for %s %s by %s",
        reimbursement.reimbursement_number, reimbursement.total_amount,
        reimbursement.currency, created_by.email,
    )
    return reimbursement
