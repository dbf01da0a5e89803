"""Course enrollment: which students take which courses, and how far along they are."""
from django.db import models
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator, MaxValueValidator


class Enrollment(models.Model):
    course = models.ForeignKey('Course', on_delete=models.CASCADE, related_name='enrollments')
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='enrollments')
    progress_percent = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(
                fields=['course', 'student'],
                name='unique_course_student'
            )
        ]

    def __str__(self):
        return f"{self.student.email} - {self.course.title}"
