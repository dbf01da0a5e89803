from django.db import models
from django.core.validators import MinValueValidator


class Exam(models.Model):
    course = models.ForeignKey(
        'Course',
        on_delete=models.CASCADE,
        related_name='exams',
        db_index=True
    )
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    week = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    duration_minutes = models.PositiveIntegerField(default=60, validators=[MinValueValidator(1)])
    exam_type = models.CharField(max_length=50, default='ielts')
    is_published = models.BooleanField(default=False, db_index=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['course', 'week'], name='testprep_ex_course__0f3c2a_idx'),
        ]

    def __str__(self):
        return self.title

    def question_ids(self):
        from .question import Question
        return set(
            Question.objects.filter(group__section__exam=self).values_list('id', flat=True)
        )


class ExamSection(models.Model):
    class SectionType(models.TextChoices):
        LISTENING = 'listening', 'Listening'
        READING = 'reading', 'Reading'
        WRITING = 'writing', 'Writing'
        SPEAKING = 'speaking', 'Speaking'
        GENERAL = 'general', 'General'

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='sections')
    section_type = models.CharField(max_length=20, choices=SectionType.choices)
    title = models.CharField(max_length=300)
    instructions = models.TextField(blank=True)
    content = models.JSONField(null=True, blank=True)
    audio_url = models.CharField(max_length=500, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    order_index = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order_index', 'id']

    def __str__(self):
        return f"{self.exam.title} / {self.title}"


class QuestionGroup(models.Model):
    section = models.ForeignKey(ExamSection, on_delete=models.CASCADE, related_name='question_groups')
    title = models.CharField(max_length=300, blank=True)
    instructions = models.TextField(blank=True)
    passage = models.TextField(blank=True)
    order_index = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order_index', 'id']

    def __str__(self):
        return self.title or f"Group {self.pk}"
