"""
Authentication Views.
Registration, login, token refresh, profile and password changes with JWT bearer tokens.
"""
import logging

from django.contrib.auth.models import User, update_last_login
from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.views import TokenRefreshView
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiExample, OpenApiResponse

from testprep.exceptions import BadRequest, Conflict
from testprep.models import AuditLog
from testprep.throttling import AuthRateThrottle
from .auth_serializers import (
    AuthUserSerializer, ChangePasswordSerializer, LoginSerializer,
    TokenPairResponseSerializer, UpdateProfileSerializer,
    UserRegistrationSerializer, issue_tokens
)

logger = logging.getLogger(__name__)


def _token_response(user):
    return {**issue_tokens(user), 'user': AuthUserSerializer(user).data}


# =============================================================================
# REGISTRATION & LOGIN
# =============================================================================

@extend_schema(
    tags=['Authentication'],
    summary="Register new user",
    description="""
**Create a student account and sign in.**

- Email must be unique (409 otherwise)
- Password minimum 6 characters
- Full name minimum 2 characters
- New accounts always get the `student` role
""",
    request=UserRegistrationSerializer,
    responses={
        200: TokenPairResponseSerializer,
        400: OpenApiResponse(description="Validation error"),
        409: OpenApiResponse(description="Email already registered"),
    },
    examples=[
        OpenApiExample(
            'Request Example',
            value={"email": "student@example.com", "password": "secret1", "fullName": "Nguyen Van A"},
            request_only=True
        )
    ]
)
class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthRateThrottle]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        email = data['email']
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username=email).exists():
            raise Conflict("Email already registered")

        with transaction.atomic():
            user = User.objects.create_user(username=email, email=email, password=data['password'])
            user.profile.full_name = data['fullName']
            user.profile.save()

        AuditLog.log(
            event_type=AuditLog.EventType.REGISTER,
            description=f"New registration: {user.email}",
            request=request,
            user=user
        )
        logger.info("Registered user %s", user.pk)

        return Response(_token_response(user))


@extend_schema(
    tags=['Authentication'],
    summary="Login",
    description="""
**Exchange email and password for a bearer token.**

Send the token as `Authorization: Bearer <token>` on later requests.
""",
    request=LoginSerializer,
    responses={
        200: TokenPairResponseSerializer,
        401: OpenApiResponse(description="Invalid email or password"),
        403: OpenApiResponse(description="Account is deactivated"),
    },
    examples=[
        OpenApiExample('Student Login', value={"email": "student@ielts.com", "password": "student123"}, request_only=True),
        OpenApiExample('Teacher Login', value={"email": "teacher@ielts.com", "password": "teacher123"}, request_only=True),
    ]
)
class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email']
        user = User.objects.filter(email__iexact=email).select_related('profile').first()

        if user is None or not user.check_password(serializer.validated_data['password']):
            AuditLog.log(
                event_type=AuditLog.EventType.LOGIN_FAILED,
                description=f"Failed login for {email}",
                request=request,
                user=user,
                metadata={'email': email}
            )
            logger.warning("Failed login for %s", email)
            raise AuthenticationFailed("Invalid email or password")

        if not user.is_active:
            raise PermissionDenied("Account is deactivated")

        update_last_login(None, user)
        AuditLog.log(
            event_type=AuditLog.EventType.LOGIN,
            description=f"Login: {user.email}",
            request=request,
            user=user
        )

        return Response(_token_response(user))


@extend_schema_view(
    post=extend_schema(
        tags=['Authentication'],
        summary="Refresh access token",
        description="Exchange a refresh token for a new access token."
    )
)
class RefreshTokenView(TokenRefreshView):
    throttle_classes = [AuthRateThrottle]


# =============================================================================
# PROFILE
# =============================================================================

@extend_schema(
    tags=['Authentication'],
    summary="Current user",
    description="Returns the signed-in user with roles.",
    responses={200: AuthUserSerializer}
)
class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(AuthUserSerializer(request.user).data)


@extend_schema(
    tags=['Authentication'],
    summary="Update profile",
    description="Update full name, bio and avatar URL of the signed-in user.",
    request=UpdateProfileSerializer,
    responses={200: AuthUserSerializer}
)
class ProfileUpdateView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = UpdateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        profile = request.user.profile
        field_map = {'fullName': 'full_name', 'bio': 'bio', 'avatarUrl': 'avatar_url'}
        for key, field in field_map.items():
            if key in data:
                setattr(profile, field, data[key])
        profile.save()

        return Response(AuthUserSerializer(request.user).data)


@extend_schema(
    tags=['Authentication'],
    summary="Change password",
    description="Change the password after confirming the current one.",
    request=ChangePasswordSerializer,
    responses={
        200: OpenApiResponse(
            description="Password changed",
            examples=[OpenApiExample('Success', value={"message": "Password changed successfully"})]
        ),
        400: OpenApiResponse(description="Current password is incorrect"),
    }
)
class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.check_password(serializer.validated_data['currentPassword']):
            raise BadRequest("Current password is incorrect")

        user.set_password(serializer.validated_data['newPassword'])
        user.save(update_fields=['password'])

        AuditLog.log(
            event_type=AuditLog.EventType.PASSWORD_CHANGE,
            description=f"Password changed: {user.email}",
            request=request,
            user=user
        )

        return Response({"message": "Password changed successfully"}, status=status.HTTP_200_OK)
