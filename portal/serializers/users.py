from rest_framework import serializers

from portal.models import User
from portal.serializers.auth import _clean_text, check_password_strength


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES], required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class AdminUserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=150, source='first_name')
    familyName = serializers.CharField(required=False, max_length=150, source='last_name')
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES], required=False)
    isVerified = serializers.BooleanField(required=False, source='is_verified')
    speciality = serializers.CharField(required=False, allow_blank=True, max_length=120)

    def validate_name(self, v):
        return _clean_text(v)

    def validate_familyName(self, v):
        return _clean_text(v)

    def validate_speciality(self, v):
        return _clean_text(v)


class AdminPasswordSerializer(serializers.Serializer):
    newPassword = serializers.CharField(source='password')

    def validate(self, attrs):
        check_password_strength(attrs['password'], self.context.get('user'), field='newPassword')
        return attrs
