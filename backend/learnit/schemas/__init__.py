from learnit.schemas.user import UserCreate, UserResponse, UserLogin, Token, LoginResponse
from learnit.schemas.machine import MachineCreate, MachineResponse, MachineListResponse
from learnit.schemas.booking import BookingCreate, BookingResponse
from learnit.schemas.certification import CertificationGrant, CertificationResponse
from learnit.schemas.course import CourseCreate, CourseResponse
from learnit.schemas.quiz import QuizCreate, QuizResponse, QuizSubmission, QuizResult

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token", "LoginResponse",
    "MachineCreate", "MachineResponse", "MachineListResponse",
    "BookingCreate", "BookingResponse",
    "CertificationGrant", "CertificationResponse",
    "CourseCreate", "CourseResponse",
    "QuizCreate", "QuizResponse", "QuizSubmission", "QuizResult",
]
