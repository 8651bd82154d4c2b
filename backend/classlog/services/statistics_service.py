"""Student attendance reports built on the analytics engine."""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from classlog import db
from classlog.models.attendance import AttendanceLog
from classlog.models.qr_session import QRSession
from classlog.models.student import Student
from classlog.models.teacher import Teacher
from classlog.services.analytics_service import AttendanceAnalyticsEngine
from classlog.services.attendance_service import AttendanceService
from classlog.services.session_store import SessionStore, SessionSnapshot

logger = logging.getLogger(__name__)

class StatisticsService:
    """Service for student-facing attendance statistics."""

    @staticmethod
    def sessions_by_subject(group_name: str, store: SessionStore = None) -> Dict[str, List[SessionSnapshot]]:
        """Sessions held for a group, keyed by subject."""
        store = store or SessionStore()
        grouped = defaultdict(list)
        for session in store.list_sessions(group_name):
            if session.subject and session.subject.strip():
                grouped[session.subject.strip()].append(session)
        return dict(grouped)

    @staticmethod
    def attendance_history(student_id: int) -> List[dict]:
        """Attendance rows for a student, newest first, with session and teacher details."""
        rows = (
            db.session.query(AttendanceLog, QRSession.subject, QRSession.name, Teacher.name)
            .outerjoin(QRSession, AttendanceLog.session_id == QRSession.id)
            .outerjoin(Teacher, QRSession.teacher_id == Teacher.id)
            .filter(AttendanceLog.student_id == student_id)
            .order_by(AttendanceLog.marked_at.desc())
            .all()
        )
        history = []
        for log, subject, session_name, teacher_name in rows:
            entry = log.to_dict(exclude=['created_at', 'updated_at'])
            entry.update({
                'subject': subject,
                'session_name': session_name,
                'teacher': teacher_name,
            })
            history.append(entry)
        return history

    @staticmethod
    def student_report(roll_no: str) -> Tuple[Optional[dict], Optional[str]]:
        """Attendance history, per-subject stats and overall percentage for one student."""
        student = Student.query.filter_by(roll_no=roll_no).first()
        if not student:
            return None, "Student not found"

        events = AttendanceService.events_for_student(student.id)
        sessions = StatisticsService.sessions_by_subject(student.group_name)
        declared = student.subject_list()

        subject_stats = AttendanceAnalyticsEngine.compute_subject_stats(
            student.id, events, sessions, declared_subjects=declared
        )
        overall = AttendanceAnalyticsEngine.compute_overall_attendance(events)

        logger.debug("Subject stats for student %s: %s", roll_no, subject_stats)

        all_subjects = sorted(set(declared) | set(sessions))
        return {
            'attendance': StatisticsService.attendance_history(student.id),
            'subject_stats': [stat.to_dict() for stat in subject_stats],
            'overall_attendance': overall,
            'student_info': {
                'name': student.name,
                'roll_no': student.roll_no,
                'group_name': student.group_name,
                'semester': student.semester,
                'subjects': all_subjects,
            },
        }, None
