from rest_framework.throttling import UserRateThrottle, AnonRateThrottle


class SubmissionRateThrottle(UserRateThrottle):
    """Rate limit for starting, answering and grading exam attempts."""
    scope = 'submission'


class AuthRateThrottle(AnonRateThrottle):
    """Rate limit for authentication endpoints to slow down brute force."""
    scope = 'auth'


class UploadRateThrottle(UserRateThrottle):
    scope = 'upload'
