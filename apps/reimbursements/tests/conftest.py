import pytest
import datetime
from decimal import Decimal
from rest_framework.test import APIClient, RequestsClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, StaffRole, BrandCode
from apps.finance.client import BackOfficeClient
from apps.reimbursements.models import Reimbursement


def make_staff(email, display_name, role, **extra):
    return User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
        role=role,
        **extra
    )


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
def backoffice_for():
    """Factory returning a BackOfficeClient wired to the in-process API as a given user."""
    return make_backoffice_client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def claimant(db):
    """Staff member claiming expenses."""
    return make_staff('claimant@example.com', 'Sami Claimant', StaffRole.STAFF,
                      department='Logistics')


@pytest.fixture
def director1(db):
    return make_staff('director1@example.com', 'Dina First', StaffRole.DIRECTOR1)


@pytest.fixture
def director2(db):
    return make_staff('director2@example.com', 'Karim Second', StaffRole.DIRECTOR2)


@pytest.fixture
def accountant(db):
    return make_staff('accountant@example.com', 'Nadia Ledger', StaffRole.ACCOUNTANT)


@pytest.fixture
def superuser(db):
    return User.objects.create_superuser(
        email='root@example.com',
        password='TestPass123!',
        display_name='Root Admin',
    )


@pytest.fixture
def claimant_client(claimant):
    """Return an API client authenticated as the claimant."""
    return jwt_client(claimant)


@pytest.fixture
def director1_client(director1):
    return jwt_client(director1)


@pytest.fixture
def director2_client(director2):
    return jwt_client(director2)


@pytest.fixture
def accountant_client(accountant):
    return jwt_client(accountant)


@pytest.fixture
def reimbursement_data():
    """Valid create payload: 250.00 at the default 20% rate."""
    return {
        'title': 'Courier to Heathrow',
        'description': 'Same-day courier for lot 42 export paperwork',
        'category': 'internal_logistics',
        'purpose': 'Export deadline for Spring Modern Art',
        'total_amount': '250.00',
        'payment_method': 'card',
        'payment_date': '2026-10-01',
        'vendor_name': 'FastCourier Ltd',
    }


@pytest.fixture
def reimbursement(claimant):
    """Pending reimbursement: 250.00 at 20%."""
    return Reimbursement.objects.create(
        brand_code=BrandCode.MSABER,
        title='Taxi to viewing',
        description='Taxi from office to private viewing',
        category='travel',
        purpose='Client viewing',
        total_amount=Decimal('250.00'),
        payment_method='cash',
        payment_date=datetime.date(2026, 10, 1),
        requested_by=claimant,
        created_by=claimant,
    )


@pytest.fixture
def make_reimbursement(claimant):
    """Factory for reimbursements with overridable fields."""
    def _make(**overrides):
        fields = {
            'brand_code': BrandCode.MSABER,
            'title': 'Stationery',
            'description': 'Printer paper and toner',
            'category': 'stationary',
            'purpose': 'Catalogue printing',
            'total_amount': Decimal('100.00'),
            'payment_method': 'card',
            'payment_date': datetime.date(2026, 9, 15),
            'requested_by': claimant,
            'created_by': claimant,
        }
        fields.update(overrides)
        return Reimbursement.objects.create(**fields)
    return _make


@pytest.fixture
def fully_approved(reimbursement, director1, director2, accountant):
    """The pending reimbursement taken through all three sign-offs."""
    reimbursement.record_decision(stage='director1', approved=True, actor=director1, comments='OK')
    reimbursement.record_decision(stage='director2', approved=True, actor=director2, comments='OK')
    reimbursement.record_decision(stage='accountant', approved=True, actor=accountant, comments='OK')
    return reimbursement


@pytest.fixture
def superuser_client(superuser):
    return jwt_client(superuser)
