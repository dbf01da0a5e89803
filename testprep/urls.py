from django.urls import include, re_path
from rest_framework.routers import DefaultRouter

from .api.auth_views import (
    ChangePasswordView, LoginView, MeView, ProfileUpdateView,
    RefreshTokenView, RegisterView,
)
from .api.views import (
    CourseViewSet, ExamViewSet, ExamSectionViewSet, QuestionGroupViewSet, QuestionViewSet,
    EnrollmentViewSet, SubmissionViewSet, UserViewSet,
    UploadView, HealthView, LogViewerView,
)


class OptionalSlashRouter(DefaultRouter):
    """DefaultRouter whose routes match with or without a trailing slash."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # SimpleRouter only accepts a boolean here; routes are built lazily
        self.trailing_slash = '/?'


router = OptionalSlashRouter()
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'exams', ExamViewSet, basename='exam')
router.register(r'sections', ExamSectionViewSet, basename='section')
router.register(r'questions/groups', QuestionGroupViewSet, basename='question-group')
router.register(r'questions', QuestionViewSet, basename='question')
router.register(r'enrollments', EnrollmentViewSet, basename='enrollment')
router.register(r'submissions', SubmissionViewSet, basename='submission')
router.register(r'users', UserViewSet, basename='user')

urlpatterns = [
    # ============================================
    # AUTHENTICATION
    # ============================================
    re_path(r'^auth/register/?$', RegisterView.as_view(), name='register'),
    re_path(r'^auth/login/?$', LoginView.as_view(), name='login'),
    re_path(r'^auth/token/refresh/?$', RefreshTokenView.as_view(), name='token-refresh'),
    re_path(r'^auth/me/?$', MeView.as_view(), name='me'),
    re_path(r'^auth/profile/?$', ProfileUpdateView.as_view(), name='profile'),
    re_path(r'^auth/change-password/?$', ChangePasswordView.as_view(), name='change-password'),

    # ============================================
    # UPLOADS
    # ============================================
    re_path(r'^uploads/?$', UploadView.as_view(), name='upload'),
    re_path(r'^uploads/image/?$', UploadView.as_view(kind='image'), name='upload-image'),
    re_path(r'^uploads/audio/?$', UploadView.as_view(kind='audio'), name='upload-audio'),

    # ============================================
    # OPERATIONS
    # ============================================
    re_path(r'^health/?$', HealthView.as_view(), name='health'),
    re_path(r'^log-viewer/?$', LogViewerView.as_view(), name='log-viewer'),
    re_path(r'^log-viewer/last/?$', LogViewerView.as_view(tail=True), name='log-viewer-last'),

    # ============================================
    # CORE API ROUTES (ViewSets)
    # ============================================
    re_path(r'', include(router.urls)),
]
