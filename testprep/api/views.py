"""
API Views for the IELTS Test-Prep platform.
Provides endpoints for courses, exams, sections, questions, enrollments,
submissions, users, uploads and operations.
"""
from collections import deque

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import Count, Prefetch
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import mixins, serializers as drf_serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    extend_schema, extend_schema_view, inline_serializer,
    OpenApiExample, OpenApiParameter, OpenApiResponse
)

from testprep.exceptions import BadRequest, Conflict
from testprep.models import (
    Course, Enrollment, Exam, QuestionGroup, Question, Submission, UserProfile
)
from testprep.pagination import SortFilter
from testprep.permissions import (
    CatalogPermission, IsAdminRole, IsStaffMember, has_role, is_staff_member
)
from testprep.services import BulkQuestionService, SubmissionLifecycle, UploadService
from testprep.services.catalog import section_tree
from testprep.throttling import SubmissionRateThrottle, UploadRateThrottle
from .filters import CourseFilter, ExamFilter, UserFilter
from .serializers import (
    BulkQuestionSerializer, CourseDetailSerializer, CourseListSerializer, CourseSerializer,
    EnrollmentCreateSerializer, EnrollmentProgressSerializer, EnrollmentSerializer,
    ExamDetailSerializer, ExamListSerializer, ExamSectionSerializer, ExamSectionTreeSerializer,
    ExamSerializer, GradeSubmissionSerializer, QuestionGroupSerializer, QuestionSerializer,
    RecordAnswersSerializer, SubmissionAnswersSerializer, SubmissionDetailSerializer,
    SubmissionListQuerySerializer, SubmissionListSerializer, SubmissionSerializer,
    SubmissionStartSerializer, UserCreateSerializer, UserDetailSerializer,
    UserListSerializer, UserSerializer, UserUpdateSerializer
)


# =============================================================================
# COURSES
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="List courses",
        description="""
Public, paginated course catalog.

Anonymous callers see only published, active courses. Filter with `search`
(title) and `level` (`beginner`, `intermediate`, `advanced` or `all`).
""",
    ),
    retrieve=extend_schema(
        summary="Get course details",
        description="Course with its active exams ordered by week."
    ),
    create=extend_schema(
        summary="Create course",
        description="Create a course. The slug is derived from the title when omitted. **Requires Teacher or Admin role.**",
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "title": "IELTS Preparation Course",
                    "description": "Four weeks of listening, reading, writing and speaking practice",
                    "level": "intermediate",
                    "price": 0,
                    "isPublished": True
                },
                request_only=True
            )
        ]
    ),
    update=extend_schema(summary="Update course", description="**Requires Teacher or Admin role.**"),
    partial_update=extend_schema(summary="Partially update course", description="**Requires Teacher or Admin role.**"),
    destroy=extend_schema(summary="Delete course", description="**Requires Admin role.**")
)
@extend_schema(tags=['Courses'])
class CourseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the course catalog.

    Courses group weekly exams. Reads are public; teachers and admins
    manage the catalog.
    """
    permission_classes = [CatalogPermission]
    lookup_value_regex = r'\d+'
    filterset_class = CourseFilter
    sort_fields = {
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
        'title': 'title',
        'price': 'price',
        'level': 'level',
    }

    def get_queryset(self):
        queryset = Course.objects.select_related('teacher__profile').annotate(
            exam_count=Count('exams', distinct=True),
            enrollment_count=Count('enrollments', distinct=True)
        )
        if not self.request.user.is_authenticated:
            queryset = queryset.filter(is_published=True, is_active=True)
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return CourseListSerializer
        if self.action in ('retrieve', 'by_slug'):
            return CourseDetailSerializer
        return CourseSerializer

    def perform_create(self, serializer):
        serializer.save(teacher=self.request.user)

    @extend_schema(
        summary="Get course by slug",
        description="Course with its published, active exams ordered by week.",
        responses={200: CourseDetailSerializer, 404: OpenApiResponse(description="Course not found")}
    )
    @action(detail=False, methods=['get'], url_path=r'slug/(?P<slug>[-\w]+)')
    def by_slug(self, request, slug=None):
        course = self.get_queryset().filter(slug=slug).first()
        if course is None:
            raise NotFound("Course not found")
        context = {**self.get_serializer_context(), 'published_only': True}
        return Response(CourseDetailSerializer(course, context=context).data)


# =============================================================================
# EXAMS
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="List exams",
        description="""
Paginated list of exams. Filter with `courseId` and `search`.

**Students** see only published, active exams.
**Teachers/Admins** see all exams including drafts.
""",
    ),
    retrieve=extend_schema(
        summary="Get exam with sections",
        description="Exam with its sections, question groups and questions. Correct answers are hidden from students."
    ),
    create=extend_schema(
        summary="Create exam",
        description="**Requires Teacher or Admin role.**",
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "courseId": 1,
                    "title": "Week 1 - Listening Practice",
                    "week": 1,
                    "durationMinutes": 30,
                    "isPublished": True
                },
                request_only=True
            )
        ]
    ),
    update=extend_schema(summary="Update exam", description="**Requires Teacher or Admin role.**"),
    partial_update=extend_schema(summary="Partially update exam", description="**Requires Teacher or Admin role.**"),
    destroy=extend_schema(summary="Delete exam", description="**Requires Admin role.**")
)
@extend_schema(tags=['Exams'])
class ExamViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, CatalogPermission]
    lookup_value_regex = r'\d+'
    filterset_class = ExamFilter
    sort_fields = {
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
        'week': 'week',
        'title': 'title',
    }

    def get_queryset(self):
        queryset = Exam.objects.select_related('course')
        if self.action == 'list':
            queryset = queryset.annotate(section_count=Count('sections'))
        elif self.action == 'retrieve':
            queryset = queryset.prefetch_related(Prefetch('sections', queryset=section_tree()))

        if not is_staff_member(self.request.user):
            queryset = queryset.filter(is_published=True, is_active=True)
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return ExamListSerializer
        if self.action == 'retrieve':
            return ExamDetailSerializer
        return ExamSerializer


# =============================================================================
# SECTIONS & QUESTIONS
# =============================================================================

@extend_schema_view(
    retrieve=extend_schema(summary="Get section", description="Section with its question groups and questions."),
    create=extend_schema(
        summary="Create section",
        description="**Requires Teacher or Admin role.**",
        examples=[
            OpenApiExample(
                'Listening Section',
                value={
                    "examId": 1,
                    "sectionType": "listening",
                    "title": "Part 1",
                    "audioUrl": "/uploads/audio/part1.mp3",
                    "orderIndex": 0
                },
                request_only=True
            )
        ]
    ),
    update=extend_schema(summary="Update section", description="**Requires Teacher or Admin role.**"),
    partial_update=extend_schema(summary="Partially update section", description="**Requires Teacher or Admin role.**"),
    destroy=extend_schema(summary="Delete section", description="**Requires Admin role.**")
)
@extend_schema(tags=['Sections'])
class ExamSectionViewSet(mixins.RetrieveModelMixin,
                         mixins.CreateModelMixin,
                         mixins.UpdateModelMixin,
                         mixins.DestroyModelMixin,
                         viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated, CatalogPermission]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = section_tree().select_related('exam')
        if not is_staff_member(self.request.user):
            queryset = queryset.filter(exam__is_published=True, exam__is_active=True)
        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ExamSectionTreeSerializer
        return ExamSectionSerializer


@extend_schema_view(
    create=extend_schema(summary="Create question group", description="**Requires Teacher or Admin role.**"),
    update=extend_schema(summary="Update question group", description="**Requires Teacher or Admin role.**"),
    partial_update=extend_schema(summary="Partially update question group", description="**Requires Teacher or Admin role.**"),
    destroy=extend_schema(summary="Delete question group", description="**Requires Admin role.**")
)
@extend_schema(tags=['Questions'])
class QuestionGroupViewSet(mixins.CreateModelMixin,
                           mixins.UpdateModelMixin,
                           mixins.DestroyModelMixin,
                           viewsets.GenericViewSet):
    queryset = QuestionGroup.objects.all()
    serializer_class = QuestionGroupSerializer
    permission_classes = [IsAuthenticated, CatalogPermission]
    lookup_value_regex = r'\d+'


@extend_schema_view(
    create=extend_schema(
        summary="Create question",
        description="""
Add a question to a question group. **Requires Teacher or Admin role.**

**Question Types:** `multiple_choice`, `fill_blank`, `matching`, `essay`,
`speaking`, `short_answer`, `true_false_not_given`, `yes_no_not_given`.
""",
        examples=[
            OpenApiExample(
                'Multiple Choice Example',
                value={
                    "groupId": 1,
                    "questionType": "multiple_choice",
                    "questionText": "What day does the course start?",
                    "options": ["Monday", "Tuesday", "Wednesday"],
                    "correctAnswer": "Monday",
                    "points": 1,
                    "orderIndex": 0
                },
                request_only=True
            )
        ]
    ),
    update=extend_schema(summary="Update question", description="**Requires Teacher or Admin role.**"),
    partial_update=extend_schema(summary="Partially update question", description="**Requires Teacher or Admin role.**"),
    destroy=extend_schema(summary="Delete question", description="**Requires Admin role.**")
)
@extend_schema(tags=['Questions'])
class QuestionViewSet(mixins.CreateModelMixin,
                      mixins.UpdateModelMixin,
                      mixins.DestroyModelMixin,
                      viewsets.GenericViewSet):
    queryset = Question.objects.select_related('group')
    serializer_class = QuestionSerializer
    permission_classes = [IsAuthenticated, CatalogPermission]
    lookup_value_regex = r'\d+'

    @extend_schema(
        summary="Bulk create questions",
        description="""
Create many questions in one group. `orderIndex` defaults to the position
in the batch and `points` to 1. **Requires Teacher or Admin role.**
""",
        request=BulkQuestionSerializer,
        responses={
            201: OpenApiResponse(
                description="Questions created",
                examples=[OpenApiExample('Success', value={"created": 2})]
            )
        }
    )
    @action(detail=False, methods=['post'])
    def bulk(self, request):
        serializer = BulkQuestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = BulkQuestionService.create_questions(
            serializer.validated_data['group'],
            serializer.validated_data['questions']
        )
        return Response({'created': len(created)}, status=status.HTTP_201_CREATED)


# =============================================================================
# ENROLLMENTS
# =============================================================================

@extend_schema(tags=['Enrollments'])
class EnrollmentViewSet(viewsets.GenericViewSet):
    """
    Course enrollments.

    Students enroll themselves; teachers and admins may enroll anyone.
    Enrolling twice returns the existing enrollment.
    """
    queryset = Enrollment.objects.select_related('course__teacher__profile', 'student__profile')
    serializer_class = EnrollmentSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
    lookup_value_regex = r'\d+'

    def _get_enrollment(self, pk):
        enrollment = self.get_queryset().filter(pk=pk).first()
        if enrollment is None:
            raise NotFound("Enrollment not found")
        return enrollment

    @extend_schema(summary="My enrollments", description="The caller's enrollments with course and teacher, newest first.")
    def list(self, request):
        enrollments = self.get_queryset().filter(student=request.user).order_by('-enrolled_at')
        return Response(EnrollmentSerializer(enrollments, many=True, context={'request': request}).data)

    @extend_schema(
        summary="Enrollments of a course",
        description="**Requires Teacher or Admin role.**",
        responses={200: inline_serializer('CourseEnrollments', {'data': EnrollmentSerializer(many=True)})}
    )
    @action(detail=False, methods=['get'], url_path=r'course/(?P<course_id>\d+)', permission_classes=[IsAuthenticated, IsStaffMember])
    def by_course(self, request, course_id=None):
        enrollments = self.get_queryset().filter(course_id=course_id).order_by('-enrolled_at')
        return Response({'data': EnrollmentSerializer(enrollments, many=True, context={'request': request}).data})

    @extend_schema(
        summary="Enroll in a course",
        description="""
Enroll the caller, or with `studentId` another user (**Teacher or Admin only**).

Returns **201** for a new enrollment and **200** with the existing one when
already enrolled. The course must exist and be published.
""",
        request=EnrollmentCreateSerializer,
        responses={200: EnrollmentSerializer, 201: EnrollmentSerializer},
        examples=[OpenApiExample('Self Enroll', value={"courseId": 1}, request_only=True)]
    )
    def create(self, request):
        serializer = EnrollmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        student = request.user
        student_id = data.get('studentId')
        if student_id is not None and student_id != request.user.pk:
            if not is_staff_member(request.user):
                raise PermissionDenied("Only teachers and admins can enroll other users.")
            student = User.objects.filter(pk=student_id).first()
            if student is None:
                raise NotFound("Student not found")

        course = Course.objects.filter(pk=data['courseId']).first()
        if course is None:
            raise NotFound("Course not found")
        if not course.is_published:
            raise BadRequest("Course is not available for enrollment")

        enrollment, created = Enrollment.objects.get_or_create(course=course, student=student)
        enrollment = self._get_enrollment(enrollment.pk)
        return Response(
            EnrollmentSerializer(enrollment, context={'request': request}).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(
        summary="Update progress",
        description="Set `progressPercent` (0-100) on one of your own enrollments.",
        request=EnrollmentProgressSerializer,
        responses={200: EnrollmentSerializer}
    )
    def update(self, request, pk=None):
        enrollment = self._get_enrollment(pk)
        if enrollment.student_id != request.user.pk:
            raise PermissionDenied("Access denied")

        serializer = EnrollmentProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enrollment.progress_percent = serializer.validated_data['progressPercent']
        enrollment.save(update_fields=['progress_percent'])
        return Response(EnrollmentSerializer(enrollment, context={'request': request}).data)

    @extend_schema(summary="Unenroll", description="Remove an enrollment. Owners and admins only.")
    def destroy(self, request, pk=None):
        enrollment = self._get_enrollment(pk)
        if enrollment.student_id != request.user.pk and not has_role(request.user, UserProfile.Role.ADMIN):
            raise PermissionDenied("Access denied")
        enrollment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# SUBMISSIONS
# =============================================================================

@extend_schema(tags=['Submissions'])
class SubmissionViewSet(viewsets.GenericViewSet):
    """
    Exam attempts: ``in_progress -> submitted -> graded``.

    Students start, answer and submit their own attempts; teachers and
    admins grade them.
    """
    queryset = Submission.objects.none()
    serializer_class = SubmissionSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [SortFilter]
    lookup_value_regex = r'\d+'
    sort_fields = {
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
        'submittedAt': 'submitted_at',
        'gradedAt': 'graded_at',
        'totalScore': 'total_score',
        'status': 'status',
    }

    def get_throttles(self):
        throttles = super().get_throttles()
        if self.action in ('create', 'update', 'grade'):
            throttles.append(SubmissionRateThrottle())
        return throttles

    @extend_schema(
        summary="List submissions",
        description="""
Paginated list of exam attempts with exam, student, grader and answer count.

**Students** always see only their own submissions (`studentId` is ignored).
**Teachers/Admins** see all submissions and may filter by `studentId`.
""",
        parameters=[
            OpenApiParameter(name='examId', type=int, location='query', description='Filter by exam'),
            OpenApiParameter(name='studentId', type=int, location='query', description='Filter by student (staff only)'),
            OpenApiParameter(name='status', type=str, location='query', enum=['in_progress', 'submitted', 'graded']),
            OpenApiParameter(name='page', type=int, location='query'),
            OpenApiParameter(name='limit', type=int, location='query'),
        ],
        responses={200: SubmissionListSerializer(many=True)}
    )
    def list(self, request):
        params = SubmissionListQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        queryset = SubmissionLifecycle.list_submissions(
            request.user,
            exam_id=params.validated_data.get('examId'),
            student_id=params.validated_data.get('studentId'),
            status=params.validated_data.get('status'),
        )
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = SubmissionListSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    @extend_schema(
        summary="Get submission",
        description="Full attempt: exam sections, question groups, questions, answers, student and grader. Owner or staff only.",
        responses={200: SubmissionDetailSerializer, 403: OpenApiResponse(description="Access denied")}
    )
    def retrieve(self, request, pk=None):
        submission = SubmissionLifecycle.get_submission(pk, request.user)
        return Response(SubmissionDetailSerializer(submission, context=self.get_serializer_context()).data)

    @extend_schema(
        summary="Start or resume an exam",
        description="""
Start an attempt on a published, active exam.

Returns **201** with a new `in_progress` submission, or **200** with the
caller's existing `in_progress` submission for the same exam.
""",
        request=SubmissionStartSerializer,
        responses={200: SubmissionSerializer, 201: SubmissionSerializer},
        examples=[OpenApiExample('Request Example', value={"examId": 1}, request_only=True)]
    )
    def create(self, request):
        serializer = SubmissionStartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        submission, created = SubmissionLifecycle.start_submission(
            serializer.validated_data['examId'], request.user, request=request
        )
        return Response(
            SubmissionSerializer(submission).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(
        summary="Record answers / submit",
        description="""
Save answers on your own `in_progress` attempt and optionally submit it.

- Each answer is upserted by question; sending a question again overwrites it
- Every `questionId` must belong to the exam and appear once per request
- The whole request is applied or nothing is
- `submit: true` moves the attempt to `submitted`
""",
        request=RecordAnswersSerializer,
        responses={200: SubmissionAnswersSerializer},
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "answers": [
                        {"questionId": 1, "answerText": "Monday"},
                        {"questionId": 2, "audioUrl": "/uploads/audio/1700000000000-answer.webm"}
                    ],
                    "submit": False
                },
                request_only=True
            )
        ]
    )
    def update(self, request, pk=None):
        serializer = RecordAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        submission = SubmissionLifecycle.record_answers(
            pk,
            serializer.validated_data['answers'],
            serializer.validated_data['submit'],
            request.user,
            request=request,
        )
        return Response(SubmissionAnswersSerializer(submission, context=self.get_serializer_context()).data)

    @extend_schema(
        summary="Grade submission",
        description="""
Score the answers of a submitted attempt. Grading an already graded
attempt overwrites the previous scores. **Requires Teacher or Admin role.**

`totalScore` defaults to the sum of the answer scores.
""",
        request=GradeSubmissionSerializer,
        responses={200: SubmissionAnswersSerializer},
        examples=[
            OpenApiExample(
                'Request Example',
                value={"grades": [{"answerId": 1, "score": 1, "feedback": "Correct"}], "totalScore": 1},
                request_only=True
            )
        ]
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsStaffMember])
    def grade(self, request, pk=None):
        serializer = GradeSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        submission = SubmissionLifecycle.grade_submission(
            pk,
            serializer.validated_data['grades'],
            serializer.validated_data.get('totalScore'),
            request.user,
            request=request,
        )
        return Response(SubmissionAnswersSerializer(submission, context=self.get_serializer_context()).data)


# =============================================================================
# USERS
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="List users",
        description="Filter with `search` (email or full name) and `role`. **Requires Teacher or Admin role.**"
    ),
    retrieve=extend_schema(summary="Get user", description="User with enrollments. **Requires Teacher or Admin role.**"),
)
@extend_schema(tags=['Users'])
class UserViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.DestroyModelMixin,
                  viewsets.GenericViewSet):
    lookup_value_regex = r'\d+'
    filterset_class = UserFilter
    sort_fields = {
        'createdAt': 'date_joined',
        'email': 'email',
        'fullName': 'profile__full_name',
    }

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [IsAuthenticated(), IsStaffMember()]
        return [IsAuthenticated(), IsAdminRole()]

    def get_queryset(self):
        queryset = User.objects.select_related('profile')
        if self.action == 'list':
            queryset = queryset.annotate(
                enrollment_count=Count('enrollments', distinct=True),
                submission_count=Count('submissions', distinct=True)
            )
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return UserListSerializer
        if self.action == 'retrieve':
            return UserDetailSerializer
        return UserSerializer

    @extend_schema(
        summary="Create user",
        description="Create an account with any role. **Requires Admin role.**",
        request=UserCreateSerializer,
        responses={201: UserSerializer, 409: OpenApiResponse(description="Email already exists")}
    )
    def create(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if User.objects.filter(email__iexact=data['email']).exists() or User.objects.filter(username=data['email']).exists():
            raise Conflict("Email already exists")

        with transaction.atomic():
            user = User.objects.create_user(username=data['email'], email=data['email'], password=data['password'])
            user.profile.full_name = data['fullName']
            user.profile.role = data['role']
            user.profile.save()

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update user",
        description="Change full name, active flag or role. **Requires Admin role.**",
        request=UserUpdateSerializer,
        responses={200: UserSerializer}
    )
    def update(self, request, pk=None):
        user = self.get_object()
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            if 'isActive' in data:
                user.is_active = data['isActive']
                user.save(update_fields=['is_active'])
            if 'fullName' in data:
                user.profile.full_name = data['fullName']
            if 'role' in data:
                user.profile.role = data['role']
            user.profile.save()

        return Response(UserSerializer(user).data)

    @extend_schema(summary="Partially update user", request=UserUpdateSerializer, responses={200: UserSerializer})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    @extend_schema(summary="Delete user", description="**Requires Admin role.**")
    def destroy(self, request, *args, **kwargs):
        return super().destroy(request, *args, **kwargs)


# =============================================================================
# UPLOADS
# =============================================================================

UPLOAD_REQUEST = {
    'multipart/form-data': {
        'type': 'object',
        'properties': {'file': {'type': 'string', 'format': 'binary'}},
        'required': ['file'],
    }
}

UPLOAD_RESPONSE = inline_serializer(
    'UploadedFile',
    {
        'url': drf_serializers.CharField(),
        'fileName': drf_serializers.CharField(),
        'mimeType': drf_serializers.CharField(),
        'size': drf_serializers.IntegerField(),
    }
)


@extend_schema(tags=['Uploads'])
class UploadView(APIView):
    """Store image and audio files on local disk, served under ``/uploads/``."""
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    throttle_classes = [UploadRateThrottle]
    kind = None

    @extend_schema(
        summary="Upload a file",
        description="""
Multipart upload in the `file` field.

- `/uploads/` accepts images and audio
- `/uploads/image` accepts jpeg, png, gif and webp
- `/uploads/audio` accepts mpeg, mp3, wav, ogg and webm

A wrong type returns 400 with `details.allowedTypes`.
""",
        request=UPLOAD_REQUEST,
        responses={200: UPLOAD_RESPONSE, 400: OpenApiResponse(description="Missing file, wrong type or too large")}
    )
    def post(self, request):
        return Response(UploadService.store(request.FILES.get('file'), kind=self.kind))

    @extend_schema(
        summary="Delete a file",
        request=inline_serializer('DeleteUpload', {'url': drf_serializers.CharField()}),
        responses={
            200: OpenApiResponse(
                description="File deleted",
                examples=[OpenApiExample('Success', value={"success": True, "message": "File deleted"})]
            ),
            400: OpenApiResponse(description="URL missing or malformed"),
            404: OpenApiResponse(description="File not found"),
        }
    )
    def delete(self, request):
        UploadService.delete(request.data.get('url'))
        return Response({'success': True, 'message': 'File deleted'})


# =============================================================================
# OPERATIONS
# =============================================================================

@extend_schema(
    tags=['Operations'],
    summary="Health check",
    responses={
        200: OpenApiResponse(
            description="Service is up",
            examples=[OpenApiExample('Success', value={"status": "ok", "timestamp": "2026-01-15T09:00:00+00:00", "version": "1.0.0"})]
        )
    }
)
class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({
            'status': 'ok',
            'timestamp': timezone.now().isoformat(),
            'version': settings.API_VERSION,
        })


class LogLinesQuerySerializer(drf_serializers.Serializer):
    lines = drf_serializers.IntegerField(min_value=1, default=100)


@extend_schema(tags=['Operations'])
class LogViewerView(APIView):
    """Plain-text view of the application log. Admins only."""
    permission_classes = [IsAuthenticated, IsAdminRole]
    tail = False

    def _open_log(self):
        try:
            return open(settings.LOG_FILE, encoding='utf-8', errors='replace')
        except FileNotFoundError:
            raise NotFound("Log file not found")

    @extend_schema(
        summary="View application log",
        description="Whole log file, or with `/last` only the last `lines` lines (default 100). **Requires Admin role.**",
        parameters=[OpenApiParameter(name='lines', type=int, location='query', description='Lines to return from /last')],
        responses={(200, 'text/plain'): OpenApiTypes.STR, 404: OpenApiResponse(description="Log file not found")}
    )
    def get(self, request):
        if self.tail:
            params = LogLinesQuerySerializer(data=request.query_params)
            if not params.is_valid():
                raise ValidationError(params.errors)
            with self._open_log() as log_file:
                content = ''.join(deque(log_file, maxlen=params.validated_data['lines']))
        else:
            with self._open_log() as log_file:
                content = log_file.read()
        return HttpResponse(content, content_type='text/plain; charset=utf-8')
