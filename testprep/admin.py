from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import (
    Course, Exam, ExamSection, QuestionGroup, Question,
    Enrollment, Submission, Answer, AuditLog, UserProfile
)


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile'


class UserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]
    list_display = ['email', 'get_full_name', 'get_role', 'is_active', 'date_joined']
    list_filter = ['is_active', 'is_superuser', 'profile__role']
    search_fields = ['email', 'profile__full_name']

    def get_full_name(self, obj):
        return obj.profile.full_name if hasattr(obj, 'profile') else '-'
    get_full_name.short_description = 'Full name'

    def get_role(self, obj):
        return obj.profile.get_role_display() if hasattr(obj, 'profile') else '-'
    get_role.short_description = 'Role'


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


class ExamInline(admin.TabularInline):
    model = Exam
    extra = 0
    fields = ['week', 'title', 'duration_minutes', 'is_published', 'is_active']
    show_change_link = True


class ExamSectionInline(admin.TabularInline):
    model = ExamSection
    extra = 0
    fields = ['order_index', 'section_type', 'title', 'audio_url', 'duration_minutes']
    show_change_link = True


class QuestionGroupInline(admin.TabularInline):
    model = QuestionGroup
    extra = 0
    fields = ['order_index', 'title', 'instructions']
    show_change_link = True


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 1
    fields = ['order_index', 'question_type', 'question_text', 'points', 'correct_answer']


class AnswerInline(admin.TabularInline):
    model = Answer
    extra = 0
    readonly_fields = ['question', 'answer_text', 'audio_url', 'score', 'feedback']
    can_delete = False


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'level', 'price', 'teacher', 'is_published', 'is_active', 'created_at']
    list_filter = ['level', 'is_published', 'is_active']
    search_fields = ['title', 'slug']
    prepopulated_fields = {'slug': ('title',)}
    inlines = [ExamInline]


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'week', 'duration_minutes', 'is_published', 'is_active', 'created_at']
    list_filter = ['is_published', 'is_active', 'course']
    search_fields = ['title', 'description']
    inlines = [ExamSectionInline]
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        (None, {'fields': ('course', 'title', 'description', 'week')}),
        ('Settings', {'fields': ('duration_minutes', 'exam_type', 'is_published', 'is_active')}),
        ('Metadata', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )


@admin.register(ExamSection)
class ExamSectionAdmin(admin.ModelAdmin):
    list_display = ['title', 'exam', 'section_type', 'order_index']
    list_filter = ['section_type']
    search_fields = ['title', 'exam__title']
    inlines = [QuestionGroupInline]


@admin.register(QuestionGroup)
class QuestionGroupAdmin(admin.ModelAdmin):
    list_display = ['id', 'section', 'title', 'order_index']
    search_fields = ['title', 'section__title']
    inlines = [QuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['id', 'group', 'question_type', 'text_preview', 'points', 'order_index']
    list_filter = ['question_type']
    search_fields = ['question_text']

    def text_preview(self, obj):
        return obj.question_text[:50] + '...' if len(obj.question_text) > 50 else obj.question_text
    text_preview.short_description = 'Question'


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'course', 'progress_percent', 'enrolled_at']
    list_filter = ['course']
    search_fields = ['student__email', 'course__title']


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'exam', 'status', 'total_score', 'graded_by', 'submitted_at']
    list_filter = ['status', 'exam']
    search_fields = ['student__email', 'exam__title']
    inlines = [AnswerInline]
    readonly_fields = ['created_at', 'updated_at', 'submitted_at', 'graded_at']
    fieldsets = (
        (None, {'fields': ('student', 'exam', 'status')}),
        ('Grading', {'fields': ('total_score', 'graded_by')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at', 'submitted_at', 'graded_at'), 'classes': ('collapse',)}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'event_type', 'user', 'ip_address', 'description_preview']
    list_filter = ['event_type', 'created_at']
    search_fields = ['user__email', 'description', 'ip_address']
    readonly_fields = ['user', 'event_type', 'description', 'ip_address', 'user_agent', 'metadata', 'created_at']
    ordering = ['-created_at']

    def description_preview(self, obj):
        return obj.description[:50] + '...' if len(obj.description) > 50 else obj.description
    description_preview.short_description = 'Description'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
