"""Seed service for sample data."""
from datetime import date, time, timedelta
from classlog import db
from classlog.models.teacher import Teacher, TeacherGroup
from classlog.models.student import Student
from classlog.models.qr_session import QRSession
from classlog.models.attendance import AttendanceLog, AttendanceStatus

SUBJECTS = ['DBMS', 'DSOOPS', 'OOSE', 'FEE']

class SeedService:
    """Populate a fresh database with one teacher, one group and a few past sessions."""

    @staticmethod
    def seed_all() -> dict:
        teacher = Teacher.query.filter_by(email='teacher@classlog.edu').first()
        if not teacher:
            teacher = Teacher(name='Dr. Meera Iyer', email='teacher@classlog.edu', department='CSE')
            teacher.set_password('teacher123')
            db.session.add(teacher)
            db.session.flush()

            for subject in SUBJECTS:
                db.session.add(TeacherGroup(teacher_id=teacher.id, group_name='G1', subject=subject))

        students = []
        for index in range(1, 6):
            roll_no = f'CS2025{index:03d}'
            student = Student.query.filter_by(roll_no=roll_no).first()
            if not student:
                student = Student(
                    name=f'Student {index}',
                    roll_no=roll_no,
                    email=f'{roll_no.lower()}@classlog.edu',
                    group_name='G1',
                    semester=3,
                    subjects=', '.join(SUBJECTS[:3]),
                )
                student.set_password('student123')
                db.session.add(student)
            students.append(student)
        db.session.flush()

        sessions = []
        if QRSession.query.filter_by(group_name='G1').count() == 0:
            start = date.today() - timedelta(days=14)
            for day in range(8):
                subject = SUBJECTS[day % 2]
                session = QRSession(
                    teacher_id=teacher.id,
                    group_name='G1',
                    subject=subject,
                    name=f'{subject} lecture {day // 2 + 1}',
                    date=start + timedelta(days=day),
                    is_active=False,
                )
                db.session.add(session)
                sessions.append(session)
            db.session.flush()

            # students attend progressively fewer sessions
            for s_index, student in enumerate(students):
                for d_index, session in enumerate(sessions):
                    if d_index >= len(sessions) - s_index:
                        continue
                    db.session.add(AttendanceLog(
                        student_id=student.id,
                        session_id=session.id,
                        date=session.date,
                        time=time(9, 0),
                        status=AttendanceStatus.PRESENT if d_index % 3 else AttendanceStatus.LATE,
                    ))

        db.session.commit()
        return {'teachers': 1, 'students': len(students), 'sessions': len(sessions)}
