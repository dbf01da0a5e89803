"""
Tests for courses, exams, sections, question groups and questions.
"""
from rest_framework import status

from testprep.models import Course, ExamSection, Question, QuestionGroup, UserProfile
from .helpers import ApiTestCase, exam_questions, make_course, make_exam, make_user


class CatalogTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.admin = make_user('admin@test.com', UserProfile.Role.ADMIN)
        self.teacher = make_user('teacher@test.com', UserProfile.Role.TEACHER)
        self.student = make_user('student@test.com')
        self.course = make_course(teacher=self.teacher)
        self.exam = make_exam(self.course)


class CourseTests(CatalogTestCase):

    def test_anonymous_sees_only_published_active(self):
        """Anonymous callers only see published, active courses."""
        make_course(title='Draft', slug='draft', is_published=False)
        make_course(title='Retired', slug='retired', is_active=False)
        response = self.client.get('/api/v1/courses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['slug'] for row in response.data['data']], ['ielts-preparation'])
        self.assertEqual(response.data['data'][0]['examCount'], 1)

    def test_authenticated_sees_all_courses(self):
        """Signed-in users see every course."""
        make_course(title='Draft', slug='draft', is_published=False)
        self.authenticate(self.student)
        response = self.client.get('/api/v1/courses/')
        self.assertEqual(response.data['meta']['total'], 2)

    def test_search_and_level_filters(self):
        """Courses filter by title search and level."""
        make_course(title='Academic Writing', slug='academic-writing', level=Course.Level.ADVANCED)
        response = self.client.get('/api/v1/courses/', {'search': 'writing'})
        self.assertEqual([row['slug'] for row in response.data['data']], ['academic-writing'])

        response = self.client.get('/api/v1/courses/', {'level': 'advanced'})
        self.assertEqual(response.data['meta']['total'], 1)

        response = self.client.get('/api/v1/courses/', {'level': 'all'})
        self.assertEqual(response.data['meta']['total'], 2)

    def test_sort_by_title(self):
        """Courses sort by title."""
        make_course(title='Academic Writing', slug='academic-writing')
        response = self.client.get('/api/v1/courses/', {'sortBy': 'title', 'sortOrder': 'asc'})
        self.assertEqual([row['title'] for row in response.data['data']], ['Academic Writing', 'IELTS Preparation Course'])

    def test_detail_lists_active_exams_by_week(self):
        """Course detail lists active exams ordered by week."""
        make_exam(self.course, title='Week 2', week=2, questions=0)
        make_exam(self.course, title='Old', week=3, questions=0, is_active=False)
        response = self.client.get(f'/api/v1/courses/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([exam['week'] for exam in response.data['exams']], [1, 2])

    def test_lookup_by_slug_only_published_exams(self):
        """Slug lookup only includes published exams."""
        make_exam(self.course, title='Draft week', week=2, questions=0, is_published=False)
        response = self.client.get('/api/v1/courses/slug/ielts-preparation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([exam['title'] for exam in response.data['exams']], [self.exam.title])

        response = self.client.get('/api/v1/courses/slug/unknown/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Course not found')

    def test_student_cannot_create_course(self):
        """Students cannot create courses."""
        self.authenticate(self.student)
        response = self.client.post('/api/v1/courses/', {'title': 'New Course'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_teacher_creates_course_with_generated_slug(self):
        """The creator becomes the teacher and the slug comes from the title."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/courses/', {
            'title': 'IELTS Academic Writing', 'level': 'advanced', 'price': 49.5
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'ielts-academic-writing')
        self.assertEqual(response.data['teacherId'], self.teacher.id)

    def test_duplicate_slug(self):
        """A taken slug is a conflict."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/courses/', {
            'title': 'Another', 'slug': 'ielts-preparation'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('slug', response.data['details'])

    def test_update_course(self):
        """Staff can update a course."""
        self.authenticate(self.teacher)
        response = self.client.patch(f'/api/v1/courses/{self.course.id}/', {'isPublished': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['isPublished'])
        self.assertEqual(response.data['slug'], 'ielts-preparation')

    def test_only_admin_deletes(self):
        """Only admins delete courses."""
        self.authenticate(self.teacher)
        response = self.client.delete(f'/api/v1/courses/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.admin)
        response = self.client.delete(f'/api/v1/courses/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Course.objects.filter(pk=self.course.id).exists())


class ExamTests(CatalogTestCase):

    def test_exams_require_authentication(self):
        """Exams are not public."""
        response = self.client.get('/api/v1/exams/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_students_see_only_published_exams(self):
        """Drafts are hidden from students."""
        draft = make_exam(self.course, title='Draft', questions=0, is_published=False)

        self.authenticate(self.student)
        response = self.client.get('/api/v1/exams/')
        self.assertEqual([row['id'] for row in response.data['data']], [self.exam.id])
        self.assertEqual(response.data['data'][0]['sectionCount'], 1)
        self.assertEqual(response.data['data'][0]['course']['slug'], 'ielts-preparation')

        response = self.client.get(f'/api/v1/exams/{draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.authenticate(self.teacher)
        response = self.client.get('/api/v1/exams/')
        self.assertEqual(response.data['meta']['total'], 2)

    def test_filter_by_course(self):
        """Exams filter by courseId."""
        other_course = make_course(title='Other', slug='other')
        make_exam(other_course, title='Other exam', questions=0)
        self.authenticate(self.student)
        response = self.client.get('/api/v1/exams/', {'courseId': self.course.id})
        self.assertEqual([row['id'] for row in response.data['data']], [self.exam.id])

    def test_detail_tree_hides_answers_from_students(self):
        """Students never see correct answers in the exam tree."""
        self.authenticate(self.student)
        response = self.client.get(f'/api/v1/exams/{self.exam.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        questions = response.data['sections'][0]['questionGroups'][0]['questions']
        self.assertEqual([q['questionText'] for q in questions], ['Question 1', 'Question 2'])
        self.assertNotIn('correctAnswer', questions[0])

        self.authenticate(self.teacher)
        response = self.client.get(f'/api/v1/exams/{self.exam.id}/')
        questions = response.data['sections'][0]['questionGroups'][0]['questions']
        self.assertEqual(questions[0]['correctAnswer'], 'answer 1')

    def test_teacher_creates_exam(self):
        """Teachers can create exams."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/exams/', {
            'courseId': self.course.id, 'title': 'Week 2 - Reading', 'week': 2, 'durationMinutes': 60
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['examType'], 'ielts')
        self.assertFalse(response.data['isPublished'])

    def test_exam_week_must_be_positive(self):
        """Week numbers start at 1."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/exams/', {
            'courseId': self.course.id, 'title': 'Bad', 'week': 0
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SectionAndQuestionTests(CatalogTestCase):

    def setUp(self):
        super().setUp()
        self.section = ExamSection.objects.get(exam=self.exam)
        self.group = QuestionGroup.objects.get(section=self.section)

    def test_retrieve_section_tree(self):
        """A section comes back with its groups and questions."""
        self.authenticate(self.student)
        response = self.client.get(f'/api/v1/sections/{self.section.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['questionGroups'][0]['questions']), 2)

    def test_create_section_and_group(self):
        """Staff can add sections and question groups."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/sections/', {
            'examId': self.exam.id, 'sectionType': 'reading', 'title': 'Passage 1', 'orderIndex': 1
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post('/api/v1/questions/groups/', {
            'sectionId': response.data['id'], 'title': 'Questions 1-5', 'passage': 'Long text'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['passage'], 'Long text')

    def test_student_cannot_create_question(self):
        """Students cannot author questions."""
        self.authenticate(self.student)
        response = self.client.post('/api/v1/questions/', {
            'groupId': self.group.id, 'questionType': 'essay', 'questionText': 'Write.'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_and_delete_question(self):
        """Staff can create and delete a question."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/questions/', {
            'groupId': self.group.id,
            'questionType': 'multiple_choice',
            'questionText': 'Pick one',
            'options': ['A', 'B'],
            'correctAnswer': 'A'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['points'], 1)
        question_id = response.data['id']

        response = self.client.delete(f'/api/v1/questions/{question_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.admin)
        response = self.client.delete(f'/api/v1/questions/{question_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_bulk_create_questions(self):
        """Bulk creation defaults orderIndex to position and points to 1."""
        empty_group = QuestionGroup.objects.create(section=self.section, title='Empty')
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/questions/bulk', {
            'groupId': empty_group.id,
            'questions': [
                {'questionType': 'fill_blank', 'questionText': 'First', 'correctAnswer': 'one'},
                {'questionType': 'essay', 'questionText': 'Second', 'points': 5},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data, {'created': 2})

        created = list(Question.objects.filter(group=empty_group).order_by('order_index'))
        self.assertEqual([q.order_index for q in created], [0, 1])
        self.assertEqual([q.points for q in created], [1, 5])

    def test_bulk_requires_questions(self):
        """Bulk creation needs at least one question."""
        self.authenticate(self.teacher)
        response = self.client.post('/api/v1/questions/bulk/', {'groupId': self.group.id, 'questions': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deleting_exam_cascades(self):
        """Deleting an exam removes its sections and questions."""
        question_ids = [q.id for q in exam_questions(self.exam)]
        self.authenticate(self.admin)
        response = self.client.delete(f'/api/v1/exams/{self.exam.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Question.objects.filter(id__in=question_ids).exists())
