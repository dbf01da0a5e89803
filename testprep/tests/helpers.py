"""
Shared fixtures for the test-prep test suite.
"""
from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework.test import APITestCase

from testprep.api.auth_serializers import issue_tokens
from testprep.models import Course, Exam, ExamSection, QuestionGroup, Question, UserProfile


def make_user(email, role=UserProfile.Role.STUDENT, password='secret123', full_name='Test User'):
    user = User.objects.create_user(username=email, email=email, password=password)
    user.profile.role = role
    user.profile.full_name = full_name
    user.profile.save()
    return user


def make_course(teacher=None, title='IELTS Preparation Course', slug='ielts-preparation', **extra):
    defaults = {'is_published': True, 'is_active': True}
    defaults.update(extra)
    return Course.objects.create(title=title, slug=slug, teacher=teacher, **defaults)


def make_exam(course, title='Week 1 - Listening Practice', questions=2, **extra):
    """Exam with one listening section, one group and ``questions`` questions."""
    defaults = {'week': 1, 'duration_minutes': 30, 'is_published': True, 'is_active': True}
    defaults.update(extra)
    exam = Exam.objects.create(course=course, title=title, **defaults)
    section = ExamSection.objects.create(
        exam=exam, section_type=ExamSection.SectionType.LISTENING, title='Part 1'
    )
    group = QuestionGroup.objects.create(section=section, title='Questions 1-2')
    for index in range(questions):
        Question.objects.create(
            group=group,
            question_type=Question.QuestionType.FILL_BLANK,
            question_text=f'Question {index + 1}',
            correct_answer=f'answer {index + 1}',
            order_index=index,
        )
    return exam


def exam_questions(exam):
    return list(Question.objects.filter(group__section__exam=exam).order_by('order_index'))


class ApiTestCase(APITestCase):
    """APITestCase with a fresh throttle cache and bearer-token helpers."""

    def setUp(self):
        cache.clear()

    def authenticate(self, user):
        token = issue_tokens(user)['token']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def logout(self):
        self.client.credentials()
