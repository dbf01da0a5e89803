from django.db import models


class Answer(models.Model):
    submission = models.ForeignKey(
        'Submission',
        on_delete=models.CASCADE,
        related_name='answers',
        db_index=True
    )
    question = models.ForeignKey(
        'Question',
        on_delete=models.CASCADE,
        related_name='answers',
        db_index=True
    )

    answer_text = models.TextField(null=True, blank=True)
    audio_url = models.CharField(max_length=500, null=True, blank=True)

    score = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    feedback = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['question__order_index', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['submission', 'question'],
                name='unique_submission_question'
            )
        ]

    def __str__(self):
        return f"Answer to question {self.question_id} in submission {self.submission_id}"
