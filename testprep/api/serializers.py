from rest_framework import serializers
from django.contrib.auth.models import User
from django.utils.text import slugify

from testprep.models import (
    Course, Exam, ExamSection, QuestionGroup, Question,
    Submission, Answer, Enrollment, UserProfile
)
from testprep.permissions import is_staff_member, user_roles


# =============================================================================
# USERS
# =============================================================================

class UserSummarySerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source='profile.full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'fullName']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source='profile.full_name', read_only=True)
    avatarUrl = serializers.CharField(source='profile.avatar_url', read_only=True)
    bio = serializers.CharField(source='profile.bio', read_only=True)
    roles = serializers.SerializerMethodField()
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'fullName', 'avatarUrl', 'bio', 'roles', 'isActive', 'createdAt']
        read_only_fields = fields

    def get_roles(self, obj) -> list[str]:
        return user_roles(obj)


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'})
    fullName = serializers.CharField(min_length=2, max_length=200)
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, default=UserProfile.Role.STUDENT)

    def validate_email(self, value):
        return value.lower()


class UserUpdateSerializer(serializers.Serializer):
    fullName = serializers.CharField(required=False, min_length=2, max_length=200)
    isActive = serializers.BooleanField(required=False)
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, required=False)


# =============================================================================
# CATALOG
# =============================================================================

class QuestionSerializer(serializers.ModelSerializer):
    groupId = serializers.PrimaryKeyRelatedField(source='group', queryset=QuestionGroup.objects.all())
    questionType = serializers.ChoiceField(source='question_type', choices=Question.QuestionType.choices)
    questionText = serializers.CharField(source='question_text')
    correctAnswer = serializers.CharField(source='correct_answer', required=False, allow_blank=True)
    orderIndex = serializers.IntegerField(source='order_index', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Question
        fields = [
            'id', 'groupId', 'questionType', 'questionText', 'options',
            'correctAnswer', 'points', 'orderIndex', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request is None or not is_staff_member(request.user):
            data.pop('correctAnswer', None)
        return data


class BulkQuestionItemSerializer(serializers.Serializer):
    questionType = serializers.ChoiceField(source='question_type', choices=Question.QuestionType.choices)
    questionText = serializers.CharField(source='question_text')
    options = serializers.JSONField(required=False, allow_null=True)
    correctAnswer = serializers.CharField(source='correct_answer', required=False, allow_blank=True)
    points = serializers.IntegerField(required=False, min_value=0)
    orderIndex = serializers.IntegerField(source='order_index', required=False)


class BulkQuestionSerializer(serializers.Serializer):
    groupId = serializers.PrimaryKeyRelatedField(source='group', queryset=QuestionGroup.objects.all())
    questions = BulkQuestionItemSerializer(many=True, allow_empty=False)


class QuestionGroupSerializer(serializers.ModelSerializer):
    sectionId = serializers.PrimaryKeyRelatedField(source='section', queryset=ExamSection.objects.all())
    orderIndex = serializers.IntegerField(source='order_index', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = QuestionGroup
        fields = [
            'id', 'sectionId', 'title', 'instructions', 'passage',
            'orderIndex', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']


class QuestionGroupTreeSerializer(QuestionGroupSerializer):
    questions = QuestionSerializer(many=True, read_only=True)

    class Meta(QuestionGroupSerializer.Meta):
        fields = QuestionGroupSerializer.Meta.fields + ['questions']


class ExamSectionSerializer(serializers.ModelSerializer):
    examId = serializers.PrimaryKeyRelatedField(source='exam', queryset=Exam.objects.all())
    sectionType = serializers.ChoiceField(source='section_type', choices=ExamSection.SectionType.choices)
    audioUrl = serializers.CharField(source='audio_url', required=False, allow_blank=True, max_length=500)
    durationMinutes = serializers.IntegerField(source='duration_minutes', required=False, allow_null=True, min_value=1)
    orderIndex = serializers.IntegerField(source='order_index', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ExamSection
        fields = [
            'id', 'examId', 'sectionType', 'title', 'instructions', 'content',
            'audioUrl', 'durationMinutes', 'orderIndex', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']


class ExamSectionTreeSerializer(ExamSectionSerializer):
    questionGroups = QuestionGroupTreeSerializer(source='question_groups', many=True, read_only=True)

    class Meta(ExamSectionSerializer.Meta):
        fields = ExamSectionSerializer.Meta.fields + ['questionGroups']


class ExamSummarySerializer(serializers.ModelSerializer):
    examType = serializers.CharField(source='exam_type', read_only=True)

    class Meta:
        model = Exam
        fields = ['id', 'title', 'examType', 'week']
        read_only_fields = fields


class ExamSerializer(serializers.ModelSerializer):
    courseId = serializers.PrimaryKeyRelatedField(source='course', queryset=Course.objects.all())
    durationMinutes = serializers.IntegerField(source='duration_minutes', required=False, min_value=1)
    examType = serializers.CharField(source='exam_type', required=False, max_length=50)
    isPublished = serializers.BooleanField(source='is_published', required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'courseId', 'title', 'description', 'week', 'durationMinutes',
            'examType', 'isPublished', 'isActive', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']


class ExamListSerializer(ExamSerializer):
    course = serializers.SerializerMethodField()
    sectionCount = serializers.IntegerField(source='section_count', read_only=True)

    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + ['course', 'sectionCount']

    def get_course(self, obj) -> dict:
        return {'id': obj.course_id, 'title': obj.course.title, 'slug': obj.course.slug}


class ExamDetailSerializer(ExamSerializer):
    sections = ExamSectionTreeSerializer(many=True, read_only=True)

    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + ['sections']


class CourseSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(required=False, allow_blank=True, max_length=220)
    thumbnailUrl = serializers.URLField(source='thumbnail_url', required=False, allow_blank=True, max_length=500)
    isPublished = serializers.BooleanField(source='is_published', required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)
    teacherId = serializers.IntegerField(source='teacher_id', read_only=True)
    teacher = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'slug', 'description', 'thumbnailUrl', 'level', 'price',
            'syllabus', 'isPublished', 'isActive', 'teacherId', 'teacher',
            'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']

    def validate(self, attrs):
        slug = attrs.get('slug')
        if not slug and self.instance is None:
            slug = slugify(attrs.get('title', ''))
            if not slug:
                raise serializers.ValidationError({'slug': ["Could not derive a slug from the title."]})
        if slug:
            clash = Course.objects.filter(slug=slug)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError({'slug': ["A course with this slug already exists."]})
            attrs['slug'] = slug
        elif 'slug' in attrs:
            attrs.pop('slug')
        return attrs


class CourseDetailSerializer(CourseSerializer):
    exams = serializers.SerializerMethodField()

    class Meta(CourseSerializer.Meta):
        fields = CourseSerializer.Meta.fields + ['exams']

    def get_exams(self, obj) -> list[dict]:
        exams = obj.exams.filter(is_active=True)
        if self.context.get('published_only'):
            exams = exams.filter(is_published=True)
        return ExamSerializer(exams.order_by('week', 'id'), many=True, context=self.context).data


# =============================================================================
# ENROLLMENTS
# =============================================================================

class EnrollmentSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    progressPercent = serializers.IntegerField(source='progress_percent', read_only=True)
    enrolledAt = serializers.DateTimeField(source='enrolled_at', read_only=True)
    course = CourseSerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = ['id', 'courseId', 'studentId', 'progressPercent', 'enrolledAt', 'course', 'student']
        read_only_fields = fields


class EnrollmentCreateSerializer(serializers.Serializer):
    courseId = serializers.IntegerField(min_value=1)
    studentId = serializers.IntegerField(min_value=1, required=False)


class EnrollmentProgressSerializer(serializers.Serializer):
    progressPercent = serializers.IntegerField(min_value=0, max_value=100)


class UserDetailSerializer(UserSerializer):
    enrollments = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['enrollments']
        read_only_fields = fields

    def get_enrollments(self, obj) -> list[dict]:
        enrollments = obj.enrollments.select_related('course')
        return [
            {
                'id': enrollment.id,
                'courseId': enrollment.course_id,
                'courseTitle': enrollment.course.title,
                'progressPercent': enrollment.progress_percent,
                'enrolledAt': serializers.DateTimeField().to_representation(enrollment.enrolled_at),
            }
            for enrollment in enrollments
        ]


# =============================================================================
# SUBMISSIONS
# =============================================================================

class AnswerSerializer(serializers.ModelSerializer):
    submissionId = serializers.IntegerField(source='submission_id', read_only=True)
    questionId = serializers.IntegerField(source='question_id', read_only=True)
    answerText = serializers.CharField(source='answer_text', read_only=True, allow_null=True)
    audioUrl = serializers.CharField(source='audio_url', read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Answer
        fields = [
            'id', 'submissionId', 'questionId', 'answerText', 'audioUrl',
            'score', 'feedback', 'createdAt', 'updatedAt'
        ]
        read_only_fields = fields


class AnswerWithQuestionSerializer(AnswerSerializer):
    question = QuestionSerializer(read_only=True)

    class Meta(AnswerSerializer.Meta):
        fields = AnswerSerializer.Meta.fields + ['question']
        read_only_fields = fields


class SubmissionSerializer(serializers.ModelSerializer):
    examId = serializers.IntegerField(source='exam_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True)
    totalScore = serializers.DecimalField(source='total_score', max_digits=7, decimal_places=2, read_only=True)
    gradedBy = serializers.IntegerField(source='graded_by_id', read_only=True)
    gradedAt = serializers.DateTimeField(source='graded_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Submission
        fields = [
            'id', 'examId', 'studentId', 'status', 'submittedAt', 'totalScore',
            'gradedBy', 'gradedAt', 'createdAt', 'updatedAt'
        ]
        read_only_fields = fields


class SubmissionListSerializer(SubmissionSerializer):
    exam = ExamSummarySerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)
    grader = UserSummarySerializer(source='graded_by', read_only=True)
    answerCount = serializers.IntegerField(source='answer_count', read_only=True)

    class Meta(SubmissionSerializer.Meta):
        fields = SubmissionSerializer.Meta.fields + ['exam', 'student', 'grader', 'answerCount']
        read_only_fields = fields


class SubmissionAnswersSerializer(SubmissionSerializer):
    """Attempt plus its answers, returned after recording or grading."""
    answers = AnswerSerializer(many=True, read_only=True)
    student = UserSummarySerializer(read_only=True)

    class Meta(SubmissionSerializer.Meta):
        fields = SubmissionSerializer.Meta.fields + ['answers', 'student']
        read_only_fields = fields


class SubmissionDetailSerializer(SubmissionSerializer):
    exam = ExamDetailSerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)
    grader = UserSummarySerializer(source='graded_by', read_only=True)
    answers = AnswerWithQuestionSerializer(many=True, read_only=True)

    class Meta(SubmissionSerializer.Meta):
        fields = SubmissionSerializer.Meta.fields + ['exam', 'student', 'grader', 'answers']
        read_only_fields = fields


class SubmissionStartSerializer(serializers.Serializer):
    examId = serializers.IntegerField(min_value=1, help_text="Exam to start or resume")


class AnswerInputSerializer(serializers.Serializer):
    questionId = serializers.IntegerField(source='question_id', min_value=1)
    answerText = serializers.CharField(source='answer_text', required=False, allow_null=True, allow_blank=True)
    audioUrl = serializers.CharField(source='audio_url', required=False, allow_null=True, allow_blank=True, max_length=500)


class RecordAnswersSerializer(serializers.Serializer):
    answers = AnswerInputSerializer(many=True, required=False, default=list)
    submit = serializers.BooleanField(required=False, default=False)


class GradeInputSerializer(serializers.Serializer):
    answerId = serializers.IntegerField(source='answer_id', min_value=1)
    score = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=0)
    feedback = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class GradeSubmissionSerializer(serializers.Serializer):
    grades = GradeInputSerializer(many=True, required=False, default=list)
    totalScore = serializers.DecimalField(
        max_digits=7, decimal_places=2, min_value=0, required=False, allow_null=True,
        help_text="Defaults to the sum of the answer scores"
    )


class SubmissionListQuerySerializer(serializers.Serializer):
    examId = serializers.IntegerField(required=False, min_value=1)
    studentId = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=Submission.Status.choices, required=False)


# =============================================================================
# LIST VARIANTS (annotated querysets)
# =============================================================================

class CourseListSerializer(CourseSerializer):
    examCount = serializers.IntegerField(source='exam_count', read_only=True)
    enrollmentCount = serializers.IntegerField(source='enrollment_count', read_only=True)

    class Meta(CourseSerializer.Meta):
        fields = CourseSerializer.Meta.fields + ['examCount', 'enrollmentCount']


class UserListSerializer(UserSerializer):
    enrollmentCount = serializers.IntegerField(source='enrollment_count', read_only=True)
    submissionCount = serializers.IntegerField(source='submission_count', read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['enrollmentCount', 'submissionCount']
        read_only_fields = fields
