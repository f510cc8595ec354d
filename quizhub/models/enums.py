"""
Enumerations shared by models, schemas and services
"""
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    MANAGER = "manager"
    ADMIN = "admin"


class QuestionKind(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    NUMERIC_FORMULA = "numeric_formula"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizType(str, enum.Enum):
    FORMATIVE = "formative"
    SUMMATIVE = "summative"
    REVISION = "revision"


class PassStatus(str, enum.Enum):
    PASSED = "passed"
    FAILED = "failed"


class MediaKind(str, enum.Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


class Language(str, enum.Enum):
    FR = "fr"
    EN = "en"
    AR = "ar"
    ES = "es"


class NotificationType(str, enum.Enum):
    QUIZ_GRADED = "quiz_graded"
    NEW_ENROLLMENT_PENDING = "new_enrollment_pending"
    ENROLLMENT_STATUS_CHANGED = "enrollment_status_changed"


class NotificationStatus(str, enum.Enum):
    UNREAD = "unread"
    READ = "read"


PRIVILEGED_ROLES = (UserRole.ADMIN, UserRole.MANAGER)
