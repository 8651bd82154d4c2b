"""Student model."""
from typing import List
from werkzeug.security import generate_password_hash, check_password_hash
from classlog import db
from classlog.models.base import BaseModel

class Student(BaseModel):
    """Student model. Students log in with their roll number."""

    __tablename__ = 'students'

    name = db.Column(db.String(255), nullable=False)
    roll_no = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Academic Info
    group_name = db.Column(db.String(50), nullable=False, index=True)
    semester = db.Column(db.Integer, nullable=True)
    subjects = db.Column(db.Text, nullable=True)  # "DBMS, OOSE"

    # Relationships
    attendance_logs = db.relationship('AttendanceLog', backref='student', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set student password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches."""
        return check_password_hash(self.password_hash, password)

    def subject_list(self) -> List[str]:
        """Declared subjects, parsed from the comma separated column."""
        if not self.subjects or not self.subjects.strip():
            return []
        return [s.strip() for s in self.subjects.split(',') if s.strip()]

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']
        result = super().to_dict(exclude=exclude)
        result['subjects'] = self.subject_list()
        return result

    def __repr__(self) -> str:
        return f'<Student {self.roll_no}>'
