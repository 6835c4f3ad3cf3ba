import pytest
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.invoices.models import Invoice, InvoiceStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a back-office staff member."""
    return User.objects.create_user(
        email='clerk@example.com',
        password='TestPass123!',
        display_name='Invoice Clerk',
    )


@pytest.fixture
def authenticated_client(api_client, staff_user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def paid_invoice(db):
    """A paid invoice for a sold painting."""
    return Invoice.objects.create(
        invoice_number='MSABER-1001',
        brand_code='MSABER',
        client_name='Layla Haddad',
        auction_name='Spring Modern Art',
        lot_number='42',
        item_title='Desert Light, oil on canvas',
        hammer_price=Decimal('1000.00'),
        buyers_premium=Decimal('250.00'),
        international_surcharge=Decimal('180.00'),
        shipping_charge=Decimal('40.00'),
        handling_charge=Decimal('15.00'),
        insurance_charge=Decimal('10.00'),
        status=InvoiceStatus.PAID,
        paid_at=timezone.now(),
    )


@pytest.fixture
def unpaid_invoice(db):
    """An unpaid invoice at another brand."""
    return Invoice.objects.create(
        invoice_number='AURUM-2001',
        brand_code='AURUM',
        client_name='Omar Aziz',
        auction_name='Islamic Art & Manuscripts',
        lot_number='7',
        item_title='Illuminated folio',
        hammer_price=Decimal('500.00'),
        buyers_premium=Decimal('125.00'),
        status=InvoiceStatus.UNPAID,
    )
