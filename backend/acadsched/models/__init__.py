from acadsched.models.activity_log import ActivityLog  # noqa: F401
from acadsched.models.faculty import Faculty, FacultyShift, FacultyStatus  # noqa: F401
from acadsched.models.schedule import ScheduleDocument, ScheduleStatus  # noqa: F401
from acadsched.models.substitute_history import SubstituteHistory  # noqa: F401
