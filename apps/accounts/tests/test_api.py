import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, StaffRole


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Valid credentials return tokens and the profile."""
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['role'] == StaffRole.STAFF

    def test_login_email_case_insensitive(self, api_client, user):
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': 'TestUser@Example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK

    def test_login_updates_last_login(self, api_client, user):
        assert user.last_login is None
        api_client.post(reverse('accounts:login'), {
            'email': user.email,
            'password': 'TestPass123!',
        })

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_wrong_password(self, api_client, user):
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': user.email,
            'password': 'WrongPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid email or password'

    def test_login_unknown_email(self, api_client, db):
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': 'nobody@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_account(self, api_client, user_inactive):
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': user_inactive.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client, db):
        response = api_client.post(reverse('accounts:login'), {'email': 'x@example.com'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        response = authenticated_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['brand_code'] == 'MSABER'

    def test_requires_authentication(self, api_client, db):
        response = api_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Staff Directory Tests
# =============================================================================

@pytest.mark.django_db
class TestStaffList:
    """Tests for GET /api/auth/staff/"""

    def test_lists_active_staff_only(self, authenticated_client, user, user_inactive, director):
        response = authenticated_client.get(reverse('accounts:staff-list'))

        assert response.status_code == status.HTTP_200_OK
        emails = {entry['email'] for entry in response.data}
        assert emails == {user.email, director.email}

    def test_filter_by_role(self, authenticated_client, user, director):
        response = authenticated_client.get(reverse('accounts:staff-list'), {'role': 'director1'})

        assert [entry['name'] for entry in response.data] == ['Dana Director']

    def test_filter_by_brand_and_search(self, authenticated_client, user, director):
        url = reverse('accounts:staff-list')

        assert len(authenticated_client.get(url, {'brand_code': 'AURUM'}).data) == 1
        assert len(authenticated_client.get(url, {'search': 'test user'}).data) == 1

    def test_requires_authentication(self, api_client, db):
        response = api_client.get(reverse('accounts:staff-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestUserModel:

    def test_superuser_holds_every_role(self, db):
        admin = User.objects.create_superuser(email='admin@example.com', password='AdminPass123!')

        assert admin.role == StaffRole.ADMIN
        assert admin.has_role(StaffRole.DIRECTOR1)
        assert admin.has_role(StaffRole.ACCOUNTANT)

    def test_staff_role_check(self, director):
        assert director.has_role(StaffRole.DIRECTOR1)
        assert not director.has_role(StaffRole.DIRECTOR2)

    def test_display_name_falls_back_to_email(self, db):
        user = User.objects.create_user(email='jo.smith@example.com', password='x')
        assert user.get_display_name() == 'jo.smith'
