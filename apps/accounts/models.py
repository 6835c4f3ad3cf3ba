from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class BrandCode(models.TextChoices):
    """Auction houses operated from this back office."""
    MSABER = 'MSABER', 'Mohammed Saber'
    AURUM = 'AURUM', 'Aurum'
    METSAB = 'METSAB', 'Metsab'


class StaffRole(models.TextChoices):
    """Back-office role; the approval roles map onto reimbursement stages."""
    STAFF = 'staff', 'Staff'
    DIRECTOR1 = 'director1', 'Director 1'
    DIRECTOR2 = 'director2', 'Director 2'
    ACCOUNTANT = 'accountant', 'Accountant'
    ADMIN = 'admin', 'Administrator'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', StaffRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Back-office staff member, authenticated by email."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    display_name = models.CharField(max_length=100, blank=True)

    # Back-office context
    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.STAFF
    )
    brand_code = models.CharField(
        max_length=10,
        choices=BrandCode.choices,
        default=BrandCode.MSABER
    )
    department = models.CharField(max_length=100, blank=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email'], name='users_email_idx'),
            models.Index(fields=['role'], name='users_role_idx'),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return display name or email prefix."""
        return self.display_name or self.email.split('@')[0]

    def has_role(self, role):
        """Superusers hold every back-office role."""
        return self.is_superuser or self.role == role
