from django.db import models
from django.core.validators import MinValueValidator


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = 'multiple_choice', 'Multiple Choice'
        FILL_BLANK = 'fill_blank', 'Fill in the Blank'
        MATCHING = 'matching', 'Matching'
        ESSAY = 'essay', 'Essay'
        SPEAKING = 'speaking', 'Speaking'
        SHORT_ANSWER = 'short_answer', 'Short Answer'
        TRUE_FALSE_NOT_GIVEN = 'true_false_not_given', 'True / False / Not Given'
        YES_NO_NOT_GIVEN = 'yes_no_not_given', 'Yes / No / Not Given'

    group = models.ForeignKey(
        'QuestionGroup',
        on_delete=models.CASCADE,
        related_name='questions',
        db_index=True
    )
    question_type = models.CharField(
        max_length=30,
        choices=QuestionType.choices,
        db_index=True
    )
    question_text = models.TextField()
    options = models.JSONField(null=True, blank=True)
    correct_answer = models.TextField(blank=True)
    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(0)])
    order_index = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order_index', 'id']
        indexes = [
            models.Index(fields=['group', 'order_index'], name='testprep_qu_group_i_5b1e7d_idx'),
        ]

    def __str__(self):
        return f"Q{self.order_index}: {self.question_text[:50]}..."
