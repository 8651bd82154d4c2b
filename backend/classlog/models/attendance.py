"""Attendance log model."""
from datetime import datetime
from enum import Enum
from classlog import db
from classlog.models.base import BaseModel

class AttendanceStatus(Enum):
    """Attendance status enumeration."""
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'

class AttendanceLog(BaseModel):
    """One student's attendance for one session. At most one row per pair."""

    __tablename__ = 'attendance_logs'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'session_id', name='uq_attendance_student_session'),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('qr_sessions.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.Time, nullable=False)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    marked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary."""
        result = super().to_dict(exclude=exclude)
        result['status'] = self.status.value if self.status else None
        return result

    def __repr__(self):
        return f'<AttendanceLog {self.student_id}-{self.session_id}>'
