"""
Bulk creation of questions inside a question group.
"""
import logging

from django.db import transaction
from django.db.models import Prefetch

from testprep.models import ExamSection, Question, QuestionGroup

logger = logging.getLogger(__name__)


class BulkQuestionService:

    @classmethod
    def create_questions(cls, group, items):
        """
        Create validated question dicts in ``group``.

        ``order_index`` defaults to the item's position in the batch and
        ``points`` to 1. The whole batch is written or nothing is.
        """
        questions = [
            Question(
                group=group,
                question_type=item['question_type'],
                question_text=item['question_text'],
                options=item.get('options'),
                correct_answer=item.get('correct_answer', ''),
                points=item.get('points', 1),
                order_index=item.get('order_index', position),
            )
            for position, item in enumerate(items)
        ]
        with transaction.atomic():
            created = Question.objects.bulk_create(questions)

        logger.info("Bulk-created %d question(s) in group %s", len(created), group.pk)
        return created


def section_tree():
    """Sections ordered for display with their groups and questions prefetched."""
    questions = Question.objects.order_by('order_index', 'id')
    groups = QuestionGroup.objects.order_by('order_index', 'id').prefetch_related(
        Prefetch('questions', queryset=questions)
    )
    return ExamSection.objects.order_by('order_index', 'id').prefetch_related(
        Prefetch('question_groups', queryset=groups)
    )
