from learnit.models.user import User
from learnit.models.machine import Machine, MachineStatus, MachineType
from learnit.models.booking import Booking, BookingStatus, ACTIVE_STATUSES
from learnit.models.certification import Certification
from learnit.models.course import Course, CourseCompletion
from learnit.models.quiz import Quiz

__all__ = [
    "User",
    "Machine", "MachineStatus", "MachineType",
    "Booking", "BookingStatus", "ACTIVE_STATUSES",
    "Certification",
    "Course", "CourseCompletion",
    "Quiz",
]
