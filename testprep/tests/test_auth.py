"""
Tests for registration, login, tokens and profile endpoints.
"""
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from testprep.models import AuditLog, UserProfile
from .helpers import ApiTestCase, make_user


class RegistrationTests(ApiTestCase):

    def test_register_returns_tokens_and_user(self):
        """New accounts are students and are signed in straight away."""
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'New.Student@Test.com',
            'password': 'secret1',
            'fullName': 'New Student'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'new.student@test.com')
        self.assertEqual(response.data['user']['fullName'], 'New Student')
        self.assertEqual(response.data['user']['roles'], ['student'])
        self.assertTrue(AuditLog.objects.filter(event_type=AuditLog.EventType.REGISTER).exists())

    def test_register_duplicate_email(self):
        """Registering an email twice is a 409 conflict."""
        make_user('taken@test.com')
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'taken@test.com', 'password': 'secret1', 'fullName': 'Someone'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'error': 'Email already registered'})

    def test_register_validation(self):
        """Malformed registration payloads fail validation."""
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'not-an-email', 'password': '123', 'fullName': 'A'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        for field in ('email', 'password', 'fullName'):
            self.assertIn(field, response.data['details'])


class LoginTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user('student@test.com', password='student123', full_name='Student One')

    def login(self, email='student@test.com', password='student123'):
        return self.client.post('/api/v1/auth/login/', {'email': email, 'password': password}, format='json')

    def test_login_success(self):
        """Valid credentials return tokens and the user."""
        response = self.login()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(event_type=AuditLog.EventType.LOGIN, user=self.user).exists())

    def test_login_token_carries_roles(self):
        """The access token carries the email and roles claims."""
        token = AccessToken(self.login().data['token'])
        self.assertEqual(token['email'], 'student@test.com')
        self.assertEqual(token['roles'], ['student'])

    def test_login_is_case_insensitive_on_email(self):
        """Email lookup on login ignores case."""
        response = self.login(email='STUDENT@test.com')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_wrong_password(self):
        """A wrong password is rejected with 401."""
        response = self.login(password='wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid email or password')
        self.assertTrue(AuditLog.objects.filter(event_type=AuditLog.EventType.LOGIN_FAILED).exists())

    def test_login_unknown_email(self):
        """An unknown email is rejected with 401."""
        response = self.login(email='nobody@test.com')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_inactive_user(self):
        """Deactivated accounts cannot log in."""
        self.user.is_active = False
        self.user.save()
        response = self.login()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Account is deactivated')

    def test_refresh_token(self):
        """A refresh token yields a new access token."""
        refresh = self.login().data['refresh']
        response = self.client.post('/api/v1/auth/token/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)


class ProfileTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user('teacher@test.com', UserProfile.Role.TEACHER, password='teacher123')

    def test_me_requires_token(self):
        """The current-user endpoint needs a bearer token."""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_with_bearer_token(self):
        """The current user is returned for a valid token."""
        self.authenticate(self.user)
        response = self.client.get('/api/v1/auth/me')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['roles'], ['teacher'])

    def test_invalid_token(self):
        """A garbage token is a 401."""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        """Users can update their own profile fields."""
        self.authenticate(self.user)
        response = self.client.put('/api/v1/auth/profile/', {
            'fullName': 'Ms Teacher', 'bio': 'Band 9 coach'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fullName'], 'Ms Teacher')
        self.assertEqual(response.data['bio'], 'Band 9 coach')

    def test_change_password(self):
        """Changing the password requires the current one."""
        self.authenticate(self.user)
        response = self.client.post('/api/v1/auth/change-password/', {
            'currentPassword': 'wrong', 'newPassword': 'newpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Current password is incorrect')

        response = self.client.post('/api/v1/auth/change-password/', {
            'currentPassword': 'teacher123', 'newPassword': 'newpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Password changed successfully')

        self.logout()
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'teacher@test.com', 'password': 'newpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
