from rest_framework import serializers

from clinic.models import User
from .common import clean_text


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField()
    # Which portal the request comes from; must match the account role.
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if not v:
            raise serializers.ValidationError('email is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('password is required')
        return v


class SignupSerializer(serializers.Serializer):
    firstname = serializers.CharField(max_length=150)
    surname = serializers.CharField(max_length=150)
    maritalStatus = serializers.CharField(max_length=20)
    gender = serializers.CharField(max_length=20)
    birthDate = serializers.DateField()
    address = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phoneNumber = serializers.CharField(max_length=32)
    password = serializers.CharField(write_only=True, min_length=8)

    def validate_firstname(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('firstname is required')
        return v

    def validate_surname(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('surname is required')
        return v

    def validate_address(self, v):
        return clean_text(v)

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('Email already exists')
        return v


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetCodeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    resetCode = serializers.CharField(max_length=8)


class ResetPasswordSerializer(ResetCodeSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
