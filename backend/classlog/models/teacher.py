"""Teacher accounts and the groups/subjects they handle."""
from werkzeug.security import generate_password_hash, check_password_hash
from classlog import db
from classlog.models.base import BaseModel

class Teacher(BaseModel):
    """Teacher model."""

    __tablename__ = 'teachers'

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(100), nullable=True)

    # Relationships
    groups = db.relationship('TeacherGroup', backref='teacher', lazy='dynamic')
    sessions = db.relationship('QRSession', backref='teacher', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set teacher password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches."""
        return check_password_hash(self.password_hash, password)

    def handles(self, group_name: str, subject: str = None) -> bool:
        """Whether this teacher is assigned to the group (and subject, if given)."""
        query = self.groups.filter_by(group_name=group_name)
        if subject is not None:
            query = query.filter_by(subject=subject)
        return query.first() is not None

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<Teacher {self.email}>'

class TeacherGroup(BaseModel):
    """A (group, subject) pair taught by a teacher."""

    __tablename__ = 'teacher_groups'
    __table_args__ = (
        db.UniqueConstraint('teacher_id', 'group_name', 'subject', name='uq_teacher_group_subject'),
    )

    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False)
    group_name = db.Column(db.String(50), nullable=False, index=True)
    subject = db.Column(db.String(100), nullable=True)

    def __repr__(self) -> str:
        return f'<TeacherGroup {self.group_name}/{self.subject}>'
