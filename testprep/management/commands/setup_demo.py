"""
Management command to set up demo data for the IELTS Test-Prep API.
Creates demo accounts, a course, a listening exam with questions and an enrollment.
"""
from django.core.management.base import BaseCommand
from django.contrib.auth.models import User
from django.db import transaction

from testprep.api.auth_serializers import issue_tokens
from testprep.models import (
    Course, Enrollment, Exam, ExamSection, QuestionGroup, Question, UserProfile
)

DEMO_ACCOUNTS = [
    ('admin@ielts.com', 'admin123', 'Admin User', UserProfile.Role.ADMIN),
    ('teacher@ielts.com', 'teacher123', 'Teacher User', UserProfile.Role.TEACHER),
    ('student@ielts.com', 'student123', 'Student User', UserProfile.Role.STUDENT),
]


class Command(BaseCommand):
    help = 'Set up demo data for testing'

    def _account(self, email, password, full_name, role):
        user, created = User.objects.get_or_create(
            username=email,
            defaults={'email': email, 'is_active': True}
        )
        if created:
            user.set_password(password)
            user.save()
            user.profile.full_name = full_name
            user.profile.role = role
            user.profile.save()
            self.stdout.write(self.style.SUCCESS(f'✓ Created {role}: {email} / {password}'))
        else:
            self.stdout.write(f'  {email} already exists')
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('\nSetting up IELTS Test-Prep demo data...\n'))

        users = {role: self._account(email, password, name, role) for email, password, name, role in DEMO_ACCOUNTS}
        teacher = users[UserProfile.Role.TEACHER]
        student = users[UserProfile.Role.STUDENT]

        course, _ = Course.objects.get_or_create(
            slug='ielts-preparation',
            defaults={
                'title': 'IELTS Preparation Course',
                'description': 'Weekly practice across listening, reading, writing and speaking',
                'level': Course.Level.INTERMEDIATE,
                'is_published': True,
                'teacher': teacher,
            }
        )
        self.stdout.write(self.style.SUCCESS(f'✓ Course: {course.title} ({course.slug})'))

        exam, created = Exam.objects.get_or_create(
            course=course,
            title='Week 1 - Listening Practice',
            defaults={
                'description': 'A short listening test about a course enquiry',
                'week': 1,
                'duration_minutes': 30,
                'is_published': True,
            }
        )

        if created:
            section = ExamSection.objects.create(
                exam=exam,
                section_type=ExamSection.SectionType.LISTENING,
                title='Part 1',
                instructions='Listen to the conversation and answer the questions.',
                order_index=0,
            )
            group = QuestionGroup.objects.create(
                section=section,
                title='Questions 1-2',
                instructions='Choose the correct answer or write ONE WORD ONLY.',
                order_index=0,
            )
            Question.objects.create(
                group=group,
                question_type=Question.QuestionType.MULTIPLE_CHOICE,
                question_text='What day does the course start?',
                options=['Monday', 'Wednesday', 'Friday'],
                correct_answer='Monday',
                order_index=0,
            )
            Question.objects.create(
                group=group,
                question_type=Question.QuestionType.FILL_BLANK,
                question_text='The classes are held in the ________ building.',
                correct_answer='library',
                order_index=1,
            )
            self.stdout.write(self.style.SUCCESS(f'✓ Exam: {exam.title} with 2 questions'))
        else:
            self.stdout.write(f'  Exam already exists: {exam.title}')

        Enrollment.objects.get_or_create(course=course, student=student)
        self.stdout.write(self.style.SUCCESS(f'✓ Enrolled {student.email} in {course.title}'))

        student_token = issue_tokens(student)['token']

        self.stdout.write(self.style.SUCCESS('\n' + '=' * 60))
        self.stdout.write(self.style.SUCCESS('Demo Setup Complete!'))
        self.stdout.write(self.style.SUCCESS('=' * 60))

        self.stdout.write('\nDemo Accounts:')
        for email, password, _, role in DEMO_ACCOUNTS:
            self.stdout.write(f'  {role:<8} {email:<20} {password}')

        self.stdout.write('\nAPI Documentation:')
        self.stdout.write('  Swagger UI: http://localhost:8000/api/docs/')
        self.stdout.write('  ReDoc:      http://localhost:8000/api/redoc/')

        self.stdout.write('\nTest API:')
        self.stdout.write(f'  curl -H "Authorization: Bearer {student_token}" http://localhost:8000/api/v1/exams/')
        self.stdout.write('')
