from .user_profile import UserProfile
from .course import Course
from .enrollment import Enrollment
from .exam import Exam, ExamSection, QuestionGroup
from .question import Question
from .submission import Submission
from .answer import Answer
from .audit import AuditLog

__all__ = [
    'UserProfile', 'Course', 'Enrollment',
    'Exam', 'ExamSection', 'QuestionGroup', 'Question',
    'Submission', 'Answer', 'AuditLog',
]
