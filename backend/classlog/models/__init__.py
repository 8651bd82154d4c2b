"""Models package with all models."""
from .base import BaseModel
from .teacher import Teacher, TeacherGroup
from .student import Student
from .qr_session import QRSession
from .attendance import AttendanceLog, AttendanceStatus

__all__ = [
    'BaseModel', 'Teacher', 'TeacherGroup', 'Student',
    'QRSession', 'AttendanceLog', 'AttendanceStatus'
]
