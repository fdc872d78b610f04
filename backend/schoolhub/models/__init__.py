from schoolhub.models.academic_year import AcademicYear  # noqa: F401
from schoolhub.models.activity_log import ActivityLog  # noqa: F401
from schoolhub.models.branch import Branch  # noqa: F401
from schoolhub.models.enums import DayOfWeek, RecordStatus  # noqa: F401
from schoolhub.models.school_class import SchoolClass  # noqa: F401
from schoolhub.models.subject import Subject  # noqa: F401
from schoolhub.models.teacher import Teacher  # noqa: F401
from schoolhub.models.timetable import TimetableEntry  # noqa: F401
from schoolhub.models.timetable_upload import TimetableBulkUpload, UploadStatus  # noqa: F401
from schoolhub.models.user import User, UserRole  # noqa: F401
