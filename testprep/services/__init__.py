from .submissions import SubmissionLifecycle
from .uploads import UploadService
from .catalog import BulkQuestionService

__all__ = ['SubmissionLifecycle', 'UploadService', 'BulkQuestionService']
