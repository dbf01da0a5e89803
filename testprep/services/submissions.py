"""
Exam attempt lifecycle: ``in_progress -> submitted -> graded``.

Every operation takes the acting user explicitly. Answer recording and
grading are all-or-nothing: the submission row is locked and the whole
batch runs in one transaction.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Prefetch
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from testprep.exceptions import InvalidState
from testprep.models import Answer, AuditLog, Exam, Submission
from testprep.permissions import is_staff_member
from testprep.services.catalog import section_tree

logger = logging.getLogger(__name__)


class SubmissionLifecycle:
    """Start, answer, submit, grade and read exam attempts."""

    @staticmethod
    def _locked(submission_id):
        try:
            return Submission.objects.select_for_update().get(pk=submission_id)
        except Submission.DoesNotExist:
            raise NotFound("Submission not found")

    @staticmethod
    def _with_answers(submission_id):
        return Submission.objects.select_related(
            'student__profile', 'graded_by__profile'
        ).prefetch_related(
            Prefetch('answers', queryset=Answer.objects.order_by('question__order_index', 'id'))
        ).get(pk=submission_id)

    @staticmethod
    def start_submission(exam_id, current_user, request=None):
        """
        Return the caller's open attempt on an exam, creating it if needed.

        Returns ``(submission, created)``.
        """
        try:
            exam = Exam.objects.get(pk=exam_id)
        except Exam.DoesNotExist:
            raise NotFound("Exam not found")

        if not exam.is_published:
            raise InvalidState("Exam is not published yet")
        if not exam.is_active:
            raise InvalidState("Exam is not available")

        # The partial unique constraint makes get_or_create race-safe: a
        # concurrent insert fails and the existing row is read back.
        with transaction.atomic():
            submission, created = Submission.objects.get_or_create(
                exam=exam,
                student=current_user,
                status=Submission.Status.IN_PROGRESS,
            )
            if created:
                AuditLog.log(
                    event_type=AuditLog.EventType.EXAM_START,
                    description=f"Started: {exam.title}",
                    request=request,
                    user=current_user,
                    metadata={'exam_id': exam.id, 'submission_id': submission.id},
                )

        if created:
            logger.info("Submission %s started by user %s on exam %s", submission.pk, current_user.pk, exam.pk)
        return submission, created

    @staticmethod
    def record_answers(submission_id, answers, submit, current_user, request=None):
        """
        Upsert answers on an open attempt and optionally submit it.

        ``answers`` is a list of dicts with ``question_id`` and optional
        ``answer_text`` / ``audio_url``. Keys that are absent leave the
        stored value untouched.
        """
        with transaction.atomic():
            submission = SubmissionLifecycle._locked(submission_id)

            if submission.student_id != current_user.pk:
                raise PermissionDenied("Access denied")
            if not submission.is_in_progress:
                raise InvalidState("Cannot modify a submitted submission")

            exam_questions = submission.exam.question_ids()
            errors = {}
            seen = set()
            for index, item in enumerate(answers):
                question_id = item['question_id']
                if question_id not in exam_questions:
                    errors[str(index)] = {'questionId': [f"Question {question_id} does not belong to this exam."]}
                elif question_id in seen:
                    errors[str(index)] = {'questionId': [f"Question {question_id} appears more than once."]}
                seen.add(question_id)
            if errors:
                raise ValidationError({'answers': errors})

            for item in answers:
                defaults = {
                    field: item[field]
                    for field in ('answer_text', 'audio_url')
                    if field in item
                }
                Answer.objects.update_or_create(
                    submission=submission,
                    question_id=item['question_id'],
                    defaults=defaults,
                )

            if submit:
                submission.status = Submission.Status.SUBMITTED
                submission.submitted_at = timezone.now()
                submission.save(update_fields=['status', 'submitted_at', 'updated_at'])
                AuditLog.log(
                    event_type=AuditLog.EventType.EXAM_SUBMIT,
                    description=f"Submitted: {submission.exam.title}",
                    request=request,
                    user=current_user,
                    metadata={
                        'exam_id': submission.exam_id,
                        'submission_id': submission.id,
                        'answer_count': submission.answers.count(),
                    },
                )

        logger.info(
            "Submission %s: %d answer(s) recorded by user %s%s",
            submission.pk, len(answers), current_user.pk, ", submitted" if submit else ""
        )
        return SubmissionLifecycle._with_answers(submission.pk)

    @staticmethod
    def grade_submission(submission_id, grades, total_score, grading_user, request=None):
        """
        Score the answers of a submitted (or already graded) attempt.

        ``grades`` is a list of dicts with ``answer_id``, ``score`` and
        optional ``feedback``. When ``total_score`` is None the sum of the
        answer scores is stored.
        """
        if not is_staff_member(grading_user):
            raise PermissionDenied("Only teachers and admins can grade submissions.")

        with transaction.atomic():
            submission = SubmissionLifecycle._locked(submission_id)

            if not submission.can_transition_to(Submission.Status.GRADED):
                raise InvalidState("Submission is still in progress")
            regrade = submission.status == Submission.Status.GRADED

            answers = {answer.pk: answer for answer in submission.answers.all()}
            for grade in grades:
                answer = answers.get(grade['answer_id'])
                if answer is None:
                    raise NotFound(f"Answer {grade['answer_id']} not found in this submission")
                answer.score = grade['score']
                if 'feedback' in grade:
                    answer.feedback = grade['feedback']
                answer.save(update_fields=['score', 'feedback', 'updated_at'])

            if total_score is None:
                total_score = sum(
                    (answer.score for answer in answers.values() if answer.score is not None),
                    Decimal('0')
                )

            submission.status = Submission.Status.GRADED
            submission.total_score = total_score
            submission.graded_by = grading_user
            submission.graded_at = timezone.now()
            submission.save(update_fields=['status', 'total_score', 'graded_by', 'graded_at', 'updated_at'])

            AuditLog.log(
                event_type=AuditLog.EventType.EXAM_GRADED,
                description=f"Graded submission {submission.pk}",
                request=request,
                user=grading_user,
                metadata={
                    'submission_id': submission.pk,
                    'student_id': submission.student_id,
                    'total_score': str(total_score),
                    'regrade': regrade,
                },
            )

        logger.info(
            "Submission %s %s by user %s: total %s",
            submission.pk, "re-graded" if regrade else "graded", grading_user.pk, total_score
        )
        return SubmissionLifecycle._with_answers(submission.pk)

    @staticmethod
    def get_submission(submission_id, current_user):
        """Full attempt tree, visible to its owner and to staff."""
        try:
            submission = Submission.objects.select_related(
                'exam', 'student__profile', 'graded_by__profile'
            ).prefetch_related(
                Prefetch('exam__sections', queryset=section_tree()),
                Prefetch(
                    'answers',
                    queryset=Answer.objects.select_related('question').order_by('question__order_index', 'id')
                ),
            ).get(pk=submission_id)
        except Submission.DoesNotExist:
            raise NotFound("Submission not found")

        if submission.student_id != current_user.pk and not is_staff_member(current_user):
            raise PermissionDenied("Access denied")
        return submission

    @staticmethod
    def list_submissions(current_user, exam_id=None, student_id=None, status=None):
        """
        Submissions visible to the caller. Non-staff callers only ever see
        their own rows, whatever ``student_id`` says.
        """
        queryset = Submission.objects.select_related(
            'exam', 'student__profile', 'graded_by__profile'
        ).annotate(answer_count=Count('answers'))

        if not is_staff_member(current_user):
            queryset = queryset.filter(student=current_user)
        elif student_id is not None:
            queryset = queryset.filter(student_id=student_id)

        if exam_id is not None:
            queryset = queryset.filter(exam_id=exam_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset
