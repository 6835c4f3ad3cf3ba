"""Staff lookups used by the requested-by and returned-by pickers."""

from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Q, QuerySet

User = get_user_model()


def list_staff(*, role: Optional[str] = None, brand_code: Optional[str] = None,
               search: Optional[str] = None) -> QuerySet:
    """Return active staff, optionally narrowed by role, brand and a name/email search."""
    queryset = User.objects.filter(is_active=True)

    if role:
        queryset = queryset.filter(role=role)
    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)
    if search:
        queryset = queryset.filter(
            Q(email__icontains=search) | Q(display_name__icontains=search)
        )

    return queryset.order_by('display_name', 'email')
