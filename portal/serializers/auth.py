import bleach
from django.contrib.auth import password_validation
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from portal.models import User


def _clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


def check_password_strength(password, user=None, field='password'):
    try:
        password_validation.validate_password(password, user)
    except DjangoValidationError as e:
        raise serializers.ValidationError({field: list(e.messages)})


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    familyName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    confirmPassword = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=[User.ROLE_PATIENT, User.ROLE_DOCTOR, User.ROLE_RECEPTION_AGENT])
    speciality = serializers.CharField(required=False, allow_blank=True, max_length=120)

    def validate_name(self, v):
        return _clean_text(v)

    def validate_familyName(self, v):
        return _clean_text(v)

    def validate_speciality(self, v):
        return _clean_text(v)

    def validate(self, attrs):
        if attrs['password'] != attrs['confirmPassword']:
            raise serializers.ValidationError({'confirmPassword': ['Passwords do not match']})
        candidate = User(email=attrs['email'], first_name=attrs['name'], last_name=attrs['familyName'])
        check_password_strength(attrs['password'], candidate)
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class VerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    verificationCode = serializers.RegexField(
        r'^\d{6}$', source='code', error_messages={'invalid': 'Verification code must be 6 digits'})


class ResendVerificationSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=150, source='first_name')
    familyName = serializers.CharField(required=False, max_length=150, source='last_name')
    email = serializers.EmailField(required=False)
    speciality = serializers.CharField(required=False, allow_blank=True, max_length=120)

    def validate_name(self, v):
        return _clean_text(v)

    def validate_familyName(self, v):
        return _clean_text(v)

    def validate_speciality(self, v):
        return _clean_text(v)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField()
    newPassword = serializers.CharField()
    confirmNewPassword = serializers.CharField()

    def validate(self, attrs):
        if attrs['newPassword'] != attrs['confirmNewPassword']:
            raise serializers.ValidationError({'confirmNewPassword': ['New passwords do not match']})
        check_password_strength(attrs['newPassword'], self.context.get('user'), field='newPassword')
        return attrs


class DeleteAccountSerializer(serializers.Serializer):
    password = serializers.CharField()
    confirmDelete = serializers.CharField()


class AddPatientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    familyName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate_name(self, v):
        return _clean_text(v)

    def validate_familyName(self, v):
        return _clean_text(v)

    def validate(self, attrs):
        candidate = User(email=attrs['email'], first_name=attrs['name'], last_name=attrs['familyName'])
        check_password_strength(attrs['password'], candidate)
        return attrs
