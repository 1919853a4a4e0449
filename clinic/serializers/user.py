from rest_framework import serializers

from clinic.models import User
from .auth import SignupSerializer
from .common import PageQuerySerializer, clean_text


class AdminCreateSerializer(SignupSerializer):
    # Staff accounts have no marital status on file.
    maritalStatus = serializers.CharField(max_length=20, required=False, default='N/A')


class AccountUpdateSerializer(serializers.Serializer):
    """Fields a user may change on their own account."""
    firstname = serializers.CharField(max_length=150, required=False)
    surname = serializers.CharField(max_length=150, required=False)
    birthDate = serializers.DateField(required=False)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    email = serializers.EmailField(required=False)
    phoneNumber = serializers.CharField(max_length=32, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=8, required=False)

    def validate_firstname(self, v):
        return clean_text(v)

    def validate_surname(self, v):
        return clean_text(v)

    def validate_address(self, v):
        return clean_text(v)

    def validate_email(self, v):
        v = v.strip().lower()
        qs = User.objects.filter(email__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('Email already exists')
        return v


class AdminUpdateSerializer(AccountUpdateSerializer):
    gender = serializers.CharField(max_length=20, required=False)
    maritalStatus = serializers.CharField(max_length=20, required=False)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
    isActive = serializers.BooleanField(required=False)


class UserListQuerySerializer(PageQuerySerializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
