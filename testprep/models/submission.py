from django.db import models
from django.contrib.auth.models import User
from django.db.models import Q


class Submission(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = 'in_progress', 'In Progress'
        SUBMITTED = 'submitted', 'Submitted'
        GRADED = 'graded', 'Graded'

    # Forward-only; graded -> graded is a re-grade
    FORWARD_TRANSITIONS = {
        'in_progress': {'submitted'},
        'submitted': {'graded'},
        'graded': {'graded'},
    }

    exam = models.ForeignKey(
        'Exam',
        on_delete=models.CASCADE,
        related_name='submissions',
        db_index=True
    )
    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='submissions',
        db_index=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True
    )

    submitted_at = models.DateTimeField(null=True, blank=True)
    total_score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    graded_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='graded_submissions'
    )
    graded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['student', 'exam'], name='testprep_su_student_8e2d41_idx'),
            models.Index(fields=['exam', 'status'], name='testprep_su_exam_id_c7a9f0_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'student'],
                condition=Q(status='in_progress'),
                name='unique_in_progress_submission'
            )
        ]

    def __str__(self):
        return f"{self.student.email} - {self.exam.title} ({self.status})"

    @property
    def is_in_progress(self):
        return self.status == self.Status.IN_PROGRESS

    def can_transition_to(self, status):
        return str(status) in self.FORWARD_TRANSITIONS.get(str(self.status), set())
