"""
Request middleware for the test-prep API: hardening headers and an audit
trail of writes to exam attempts.
"""
import logging
import re

from django.conf import settings

logger = logging.getLogger(__name__)

DOC_PATHS = ('/api/docs/', '/api/redoc/', '/api/schema/')
SUBMISSION_PATH = re.compile(r'/submissions(/|$)')


def get_client_ip(request):
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


class SecurityHeadersMiddleware:
    """Add security headers to all responses."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        response['X-Frame-Options'] = 'DENY'
        response['X-Content-Type-Options'] = 'nosniff'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response['Permissions-Policy'] = 'geolocation=(), camera=()'

        # Authenticated API payloads must not be cached
        if request.path.startswith('/api/') and not request.path.startswith(DOC_PATHS):
            response['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
            response['Pragma'] = 'no-cache'

        if not settings.DEBUG and not request.path.startswith(DOC_PATHS):
            response['Content-Security-Policy'] = (
                "default-src 'self'; "
                "img-src 'self' data:; "
                "media-src 'self'; "
                "frame-ancestors 'none'"
            )

        return response


class SubmissionAuditMiddleware:
    """Log every write to an exam attempt with caller, IP and outcome."""

    WRITE_METHODS = ('POST', 'PUT', 'PATCH')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if request.method in self.WRITE_METHODS and SUBMISSION_PATH.search(request.path):
            user = getattr(request, 'user', None)
            logger.info(
                "SUBMISSION_WRITE | User: %s | IP: %s | %s %s | Status: %s",
                user.pk if user is not None and user.is_authenticated else 'anonymous',
                get_client_ip(request),
                request.method,
                request.path,
                response.status_code,
            )

        return response
