import pytest
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient, RequestsClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, StaffRole
from apps.finance.client import BackOfficeClient
from apps.invoices.models import Invoice, InvoiceStatus
from apps.refunds.services import create_refund


def jwt_client(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def make_backoffice_client(user):
    refresh = RefreshToken.for_user(user)
    return BackOfficeClient(
        'http://testserver',
        token=str(refresh.access_token),
        session=RequestsClient(),
        max_retries=1,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def clerk(db):
    """Create and return the staff member raising refunds."""
    return User.objects.create_user(
        email='clerk@example.com',
        password='TestPass123!',
        display_name='Refund Clerk',
        role=StaffRole.STAFF,
    )


@pytest.fixture
def porter(db):
    """Create and return the staff member who receives returned items."""
    return User.objects.create_user(
        email='porter@example.com',
        password='TestPass123!',
        display_name='Warehouse Porter',
    )


@pytest.fixture
def authenticated_client(api_client, clerk):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(clerk)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def director(db):
    """Director who approves refunds."""
    return User.objects.create_user(
        email='director@example.com',
        password='TestPass123!',
        display_name='Huda Director',
        role=StaffRole.DIRECTOR1,
    )


@pytest.fixture
def accountant(db):
    """Accountant who processes approved refunds."""
    return User.objects.create_user(
        email='accounts@example.com',
        password='TestPass123!',
        display_name='Rania Accountant',
        role=StaffRole.ACCOUNTANT,
    )


@pytest.fixture
def director_client(director):
    return jwt_client(director)


@pytest.fixture
def accountant_client(accountant):
    return jwt_client(accountant)


@pytest.fixture
def backoffice_for():
    """Factory returning a BackOfficeClient wired to the in-process API as a given user."""
    return make_backoffice_client


@pytest.fixture
def backoffice_client(clerk):
    """BackOfficeClient wired to the in-process API through DRF's RequestsClient."""
    return make_backoffice_client(clerk)


@pytest.fixture
def paid_invoice(db):
    """Paid invoice: hammer 1000, premium 250, intl 180, local 40, handling 15 + insurance 10."""
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
    """Create and return an unpaid invoice."""
    return Invoice.objects.create(
        invoice_number='AURUM-2001',
        brand_code='AURUM',
        client_name='Omar Aziz',
        hammer_price=Decimal('500.00'),
        buyers_premium=Decimal('125.00'),
        status=InvoiceStatus.UNPAID,
    )


@pytest.fixture
def artwork_refund_data(paid_invoice):
    """Valid create payload for an artwork refund."""
    return {
        'invoice': paid_invoice.id,
        'type': 'refund_of_artwork',
        'reason': 'Condition not as described',
        'refund_method': 'bank_transfer',
        'hammer_price': '1000.00',
        'buyers_premium': '250.00',
        'amount': '1250.00',
    }


@pytest.fixture
def pending_refund(clerk, paid_invoice):
    """Artwork refund for 1250.00, raised by the clerk and awaiting approval."""
    return create_refund(
        created_by=clerk,
        invoice_id=paid_invoice.id,
        type='refund_of_artwork',
        reason='Condition not as described',
        refund_method='bank_transfer',
        hammer_price=Decimal('1000.00'),
        buyers_premium=Decimal('250.00'),
    )


@pytest.fixture
def approved_refund(pending_refund, director):
    pending_refund.approve(actor=director, comments='Agreed with client')
    return pending_refund
