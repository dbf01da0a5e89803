"""
HTTP tests for /api/v1/submissions.
"""
from decimal import Decimal

from rest_framework import status

from testprep.models import Answer, Submission, UserProfile
from .helpers import ApiTestCase, exam_questions, make_course, make_exam, make_user

BASE = '/api/v1/submissions/'


class SubmissionApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.teacher = make_user('teacher@test.com', UserProfile.Role.TEACHER)
        self.student = make_user('student@test.com')
        self.other_student = make_user('other@test.com')
        self.exam = make_exam(make_course(teacher=self.teacher))
        self.q1, self.q2 = exam_questions(self.exam)

    def start(self, user=None):
        self.authenticate(user or self.student)
        return self.client.post(BASE, {'examId': self.exam.id}, format='json')

    def answer(self, submission_id, answers, submit=False):
        return self.client.put(
            f'{BASE}{submission_id}/', {'answers': answers, 'submit': submit}, format='json'
        )

    def test_requires_authentication(self):
        """Anonymous callers get a 401 envelope."""
        response = self.client.get(BASE)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_start_then_resume(self):
        """First start is 201, repeating it returns the same attempt with 200."""
        first = self.start()
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['status'], 'in_progress')
        self.assertEqual(first.data['examId'], self.exam.id)

        second = self.client.post(BASE, {'examId': self.exam.id}, format='json')
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data['id'], first.data['id'])

    def test_start_unpublished_exam(self):
        """Starting a draft exam is a 400 with a clear message."""
        self.exam.is_published = False
        self.exam.save()
        response = self.start()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Exam is not published yet')

    def test_start_inactive_exam(self):
        """Inactive exams report that they are unavailable."""
        self.exam.is_active = False
        self.exam.save()
        response = self.start()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Exam is not available')

    def test_start_missing_exam(self):
        """Starting an unknown exam is a 404."""
        self.authenticate(self.student)
        response = self.client.post(BASE, {'examId': 999999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Exam not found')

    def test_start_requires_exam_id(self):
        """examId is required."""
        self.authenticate(self.student)
        response = self.client.post(BASE, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('examId', response.data['details'])

    def test_record_and_submit(self):
        """Answers are saved and the attempt submitted in one request."""
        submission_id = self.start().data['id']
        response = self.answer(submission_id, [
            {'questionId': self.q1.id, 'answerText': 'answer 1'},
            {'questionId': self.q2.id, 'audioUrl': '/uploads/audio/1-a.webm'},
        ], submit=True)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'submitted')
        self.assertIsNotNone(response.data['submittedAt'])
        self.assertEqual(len(response.data['answers']), 2)
        self.assertEqual(response.data['answers'][1]['audioUrl'], '/uploads/audio/1-a.webm')

    def test_submitted_attempt_rejects_changes(self):
        """Submitted attempts are read only."""
        submission_id = self.start().data['id']
        self.answer(submission_id, [], submit=True)
        response = self.answer(submission_id, [{'questionId': self.q1.id, 'answerText': 'late'}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot modify a submitted submission')

    def test_other_student_cannot_answer(self):
        """Writing to someone else's attempt is a 403."""
        submission_id = self.start().data['id']
        self.authenticate(self.other_student)
        response = self.answer(submission_id, [{'questionId': self.q1.id, 'answerText': 'x'}])
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Access denied')

    def test_foreign_question_is_validation_error(self):
        """Questions from another exam fail the whole batch."""
        foreign = exam_questions(make_exam(self.exam.course, title='Week 2'))[0]
        submission_id = self.start().data['id']
        response = self.answer(submission_id, [
            {'questionId': self.q1.id, 'answerText': 'ok'},
            {'questionId': foreign.id, 'answerText': 'no'},
        ])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('answers', response.data['details'])
        self.assertFalse(Answer.objects.filter(submission_id=submission_id).exists())

    def test_grade_flow(self):
        """Students cannot grade; teachers can."""
        submission_id = self.start().data['id']
        self.answer(submission_id, [{'questionId': self.q1.id, 'answerText': 'answer 1'}], submit=True)
        answer_id = Answer.objects.get(submission_id=submission_id).id

        # Students cannot grade
        response = self.client.post(
            f'{BASE}{submission_id}/grade/', {'grades': [{'answerId': answer_id, 'score': 1}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.teacher)
        response = self.client.post(
            f'{BASE}{submission_id}/grade/',
            {'grades': [{'answerId': answer_id, 'score': 1, 'feedback': 'Correct'}], 'totalScore': 1},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'graded')
        self.assertEqual(Decimal(str(response.data['totalScore'])), Decimal('1'))
        self.assertEqual(response.data['gradedBy'], self.teacher.id)
        self.assertEqual(response.data['answers'][0]['feedback'], 'Correct')

    def test_grade_in_progress(self):
        """Grading an open attempt is a 400."""
        submission_id = self.start().data['id']
        self.authenticate(self.teacher)
        response = self.client.post(f'{BASE}{submission_id}/grade/', {'grades': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Submission is still in progress')

    def test_negative_score_rejected(self):
        """Scores cannot be negative."""
        submission_id = self.start().data['id']
        self.answer(submission_id, [{'questionId': self.q1.id, 'answerText': 'x'}], submit=True)
        answer_id = Answer.objects.get(submission_id=submission_id).id
        self.authenticate(self.teacher)
        response = self.client.post(
            f'{BASE}{submission_id}/grade/', {'grades': [{'answerId': answer_id, 'score': -1}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_hides_correct_answers_from_students(self):
        """correctAnswer is only shown to staff."""
        submission_id = self.start().data['id']
        self.answer(submission_id, [{'questionId': self.q1.id, 'answerText': 'x'}])

        response = self.client.get(f'{BASE}{submission_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        question = response.data['exam']['sections'][0]['questionGroups'][0]['questions'][0]
        self.assertNotIn('correctAnswer', question)
        self.assertNotIn('correctAnswer', response.data['answers'][0]['question'])

        self.authenticate(self.teacher)
        response = self.client.get(f'{BASE}{submission_id}/')
        question = response.data['exam']['sections'][0]['questionGroups'][0]['questions'][0]
        self.assertEqual(question['correctAnswer'], 'answer 1')

    def test_detail_of_other_student(self):
        """Other students get a 403 on detail."""
        submission_id = self.start().data['id']
        self.authenticate(self.other_student)
        response = self.client.get(f'{BASE}{submission_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_only_own_for_students(self):
        """Students see their own attempts even when asking for someone else's."""
        mine = self.start().data['id']
        self.start(self.other_student)

        self.authenticate(self.student)
        response = self.client.get(BASE, {'studentId': self.other_student.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data['data']], [mine])
        self.assertEqual(response.data['meta'], {'total': 1, 'page': 1, 'limit': 10, 'totalPages': 1})

    def test_staff_list_with_filters_and_sorting(self):
        """Staff list every attempt with filters and sorting."""
        first = self.start().data['id']
        second = self.start(self.other_student).data['id']

        self.authenticate(self.teacher)
        response = self.client.get(BASE, {'sortBy': 'createdAt', 'sortOrder': 'asc'})
        self.assertEqual([row['id'] for row in response.data['data']], [first, second])
        self.assertEqual(response.data['data'][0]['exam']['title'], self.exam.title)
        self.assertEqual(response.data['data'][0]['answerCount'], 0)

        response = self.client.get(BASE, {'studentId': self.other_student.id})
        self.assertEqual([row['id'] for row in response.data['data']], [second])

        response = self.client.get(BASE, {'status': 'graded'})
        self.assertEqual(response.data['data'], [])

    def test_pagination_bounds(self):
        """Pages past the end are empty; limit is bounded."""
        self.start()
        response = self.client.get(BASE, {'page': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])
        self.assertEqual(response.data['meta']['total'], 1)

        response = self.client.get(BASE, {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(BASE, {'limit': 101})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_sort(self):
        """Unknown sort fields and orders are rejected."""
        self.start()
        response = self.client.get(BASE, {'sortBy': 'password'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sortBy', response.data['details'])

        response = self.client.get(BASE, {'sortOrder': 'sideways'})
        self.assertIn('sortOrder', response.data['details'])

    def test_only_one_open_attempt_per_exam(self):
        """Repeated starts keep a single open attempt."""
        self.start()
        self.start()
        self.assertEqual(
            Submission.objects.filter(student=self.student, status=Submission.Status.IN_PROGRESS).count(), 1
        )


class SubmissionRoutesWithoutSlashTests(ApiTestCase):
    """Router paths answer directly whether or not the trailing slash is sent."""

    def setUp(self):
        super().setUp()
        self.teacher = make_user('teacher@test.com', UserProfile.Role.TEACHER)
        self.student = make_user('student@test.com')
        self.exam = make_exam(make_course(teacher=self.teacher))
        self.q1 = exam_questions(self.exam)[0]

    def test_full_attempt_without_trailing_slash(self):
        """Start, list, answer, read and grade all resolve without redirects."""
        self.authenticate(self.student)
        response = self.client.post('/api/v1/submissions', {'examId': self.exam.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        submission_id = response.data['id']

        response = self.client.get('/api/v1/submissions')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data['data']], [submission_id])

        response = self.client.put(
            f'/api/v1/submissions/{submission_id}',
            {'answers': [{'questionId': self.q1.id, 'answerText': 'answer 1'}], 'submit': True},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'submitted')

        response = self.client.get(f'/api/v1/submissions/{submission_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        answer_id = response.data['answers'][0]['id']

        self.authenticate(self.teacher)
        response = self.client.post(
            f'/api/v1/submissions/{submission_id}/grade',
            {'grades': [{'answerId': answer_id, 'score': 1}]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'graded')

    def test_catalog_routes_without_trailing_slash(self):
        """Other router prefixes accept slash-less paths too."""
        response = self.client.get('/api/v1/courses')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.authenticate(self.student)
        response = self.client.get(f'/api/v1/exams/{self.exam.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_writes_are_audited_with_and_without_slash(self):
        """The request audit log records submission writes on both path forms."""
        self.authenticate(self.student)
        with self.assertLogs('testprep.middleware', level='INFO') as captured:
            self.client.post('/api/v1/submissions', {'examId': self.exam.id}, format='json')
            self.client.post('/api/v1/submissions/', {'examId': self.exam.id}, format='json')
        self.assertEqual(len(captured.records), 2)
        self.assertIn('POST /api/v1/submissions |', captured.output[0])
        self.assertIn('POST /api/v1/submissions/ |', captured.output[1])

    def test_reads_are_not_audited(self):
        """GET requests never produce a submission write record."""
        self.authenticate(self.student)
        with self.assertNoLogs('testprep.middleware', level='INFO'):
            self.client.get('/api/v1/submissions')
