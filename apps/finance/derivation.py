"""
Amount derivation rules for refunds and reimbursements.

Everything here is pure: the same inputs always give the same Decimal, so
the drafts can call these on every keystroke and the server can call them
again on save and get an identical answer.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Mapping, Optional

from django.db import models

from .exceptions import InvalidInputError

TWO_PLACES = Decimal('0.01')
MONEY_PLACES = 2
ZERO = Decimal('0.00')
DEFAULT_TAX_RATE = Decimal('0.20')


class RefundType(models.TextChoices):
    ARTWORK = 'refund_of_artwork', 'Refund of Artwork'
    COURIER_DIFFERENCE = 'refund_of_courier_difference', 'Refund of Courier Difference'


class CostField(models.TextChoices):
    """Cost components a refund amount is derived from."""
    HAMMER_PRICE = 'hammer_price', 'Hammer Price'
    BUYERS_PREMIUM = 'buyers_premium', "Buyer's Premium"
    INTERNATIONAL_SHIPPING_COST = 'international_shipping_cost', 'International Shipping Cost'
    LOCAL_SHIPPING_COST = 'local_shipping_cost', 'Local Shipping Cost'
    HANDLING_INSURANCE_COST = 'handling_insurance_cost', 'Handling & Insurance Cost'


COST_FIELDS = tuple(CostField.values)


def round2(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_amount(value, *, field: str, allow_negative: bool = False,
                 places: Optional[int] = None) -> Decimal:
    """
    Convert user input into a Decimal.

    None and empty strings count as zero. Everything else must be a finite
    number; booleans are rejected even though Python treats them as ints.

    Args:
        value: Raw input (Decimal, int, float, or numeric string)
        field: Field name reported on failure
        allow_negative: Accept values below zero
        places: Maximum number of decimal places accepted, if any

    Returns:
        The parsed Decimal (not rounded)

    Raises:
        InvalidInputError: If the value cannot be used as an amount
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number", field=field)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO
    if isinstance(value, float):
        # str() keeps 0.1 as 0.1 rather than its binary expansion
        value = str(value)

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number", field=field)

    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be a finite number", field=field)
    if amount < 0 and not allow_negative:
        raise InvalidInputError(f"{field} cannot be negative", field=field)
    if places is not None and amount.as_tuple().exponent < -places:
        raise InvalidInputError(
            f"{field} must have at most {places} decimal places", field=field
        )

    return amount


def derive_refund_amount(refund_type, costs: Mapping) -> Decimal:
    """
    Compute a refund amount from its type and cost components.

    Artwork refunds return hammer price plus buyer's premium. Courier
    difference refunds return international shipping minus local shipping
    plus handling and insurance, floored at zero. Missing components are 0.

    Raises:
        InvalidInputError: If the type is unknown or a component is invalid
    """
    if refund_type not in RefundType.values:
        raise InvalidInputError(f"Unknown refund type: {refund_type!r}", field='type')

    parsed = {
        name: parse_amount(costs.get(name), field=name)
        for name in COST_FIELDS
    }

    if refund_type == RefundType.ARTWORK:
        amount = parsed['hammer_price'] + parsed['buyers_premium']
    else:
        amount = max(
            ZERO,
            parsed['international_shipping_cost']
            - parsed['local_shipping_cost']
            + parsed['handling_insurance_cost'],
        )

    return round2(amount)


@dataclass(frozen=True)
class TaxBreakdown:
    total_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    net_amount: Decimal


def parse_tax_rate(value) -> Decimal:
    """Parse a tax rate, which must be a fraction in [0, 1] with up to four places."""
    rate = parse_amount(value, field='tax_rate', places=4)
    if rate > 1:
        raise InvalidInputError("tax_rate must be between 0 and 1", field='tax_rate')
    return rate


def derive_tax(total_amount, tax_rate: Optional[object] = DEFAULT_TAX_RATE) -> TaxBreakdown:
    """
    Split a gross amount into tax and net.

    tax_amount = round2(total * rate); net_amount = total - tax_amount.
    A rate of None falls back to DEFAULT_TAX_RATE.

    Raises:
        InvalidInputError: If the total is invalid or the rate is outside [0, 1]
    """
    total = round2(parse_amount(total_amount, field='total_amount'))
    rate = DEFAULT_TAX_RATE if tax_rate is None else parse_tax_rate(tax_rate)

    tax_amount = round2(total * rate)
    return TaxBreakdown(
        total_amount=total,
        tax_rate=rate,
        tax_amount=tax_amount,
        net_amount=total - tax_amount,
    )
