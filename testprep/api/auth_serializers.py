"""
Authentication Serializers with validation.
"""
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError

from testprep.permissions import user_roles


class RoleClaimsTokenSerializer(TokenObtainPairSerializer):
    """Access and refresh tokens that carry the user's email and roles."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['roles'] = user_roles(user)
        return token


def issue_tokens(user):
    refresh = RoleClaimsTokenSerializer.get_token(user)
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


class AuthUserSerializer(serializers.ModelSerializer):
    """The signed-in user as the frontend sees it."""
    fullName = serializers.CharField(source='profile.full_name', read_only=True)
    avatarUrl = serializers.CharField(source='profile.avatar_url', read_only=True)
    bio = serializers.CharField(source='profile.bio', read_only=True)
    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'fullName', 'avatarUrl', 'bio', 'roles']
        read_only_fields = fields

    def get_roles(self, obj) -> list[str]:
        return user_roles(obj)


class UserRegistrationSerializer(serializers.Serializer):
    email = serializers.EmailField(help_text="Login email, must be unique")
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        style={'input_type': 'password'},
        help_text="Minimum 6 characters"
    )
    fullName = serializers.CharField(min_length=2, max_length=200, help_text="Display name")

    def validate_email(self, value):
        return value.lower()

    def validate_password(self, value):
        try:
            validate_password(value)
        except ValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(help_text="Account email")
    password = serializers.CharField(
        style={'input_type': 'password'},
        help_text="Account password"
    )

    def validate_email(self, value):
        return value.lower()


class UpdateProfileSerializer(serializers.Serializer):
    fullName = serializers.CharField(required=False, min_length=2, max_length=200)
    bio = serializers.CharField(required=False, allow_blank=True)
    avatarUrl = serializers.CharField(required=False, allow_blank=True, max_length=500)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(
        style={'input_type': 'password'},
        help_text="Current password"
    )
    newPassword = serializers.CharField(
        min_length=6,
        style={'input_type': 'password'},
        help_text="New password (min 6 characters)"
    )

    def validate_newPassword(self, value):
        try:
            validate_password(value)
        except ValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value


class TokenPairResponseSerializer(serializers.Serializer):
    token = serializers.CharField()
    refresh = serializers.CharField()
    user = AuthUserSerializer()
