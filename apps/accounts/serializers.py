from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current staff member's profile."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'role',
            'brand_code',
            'department',
            'is_superuser',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserLoginSerializer(serializers.Serializer):
    """Serializer for staff login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class StaffSerializer(serializers.ModelSerializer):
    """Compact staff entry for pickers and nested references."""

    name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'brand_code']
        read_only_fields = fields
