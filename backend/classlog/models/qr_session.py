"""Attendance session with a rotating QR token."""
from datetime import date
from classlog import db
from classlog.models.base import BaseModel

class QRSession(BaseModel):
    """One teacher-initiated attendance window for a group and subject."""

    __tablename__ = 'qr_sessions'

    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False)
    group_name = db.Column(db.String(50), nullable=False, index=True)
    subject = db.Column(db.String(100), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    date = db.Column(db.Date, default=date.today, nullable=False)

    # Watermark: epoch milliseconds of the latest rotation, never decreases
    last_renewed_at = db.Column(db.BigInteger, nullable=False, default=0)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Stats
    avg_attendance = db.Column(db.Float, default=0.0, nullable=False)

    # Relationships
    attendance_logs = db.relationship('AttendanceLog', backref='session', lazy='dynamic')

    def __repr__(self) -> str:
        return f'<QRSession {self.id} {self.group_name}/{self.subject}>'
