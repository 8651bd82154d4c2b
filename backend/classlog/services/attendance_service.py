"""
Attendance recording service.
Turns scanned QR payloads and manual teacher marks into attendance rows,
keeping a single row per (student, session).
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError

from classlog import db
from classlog.models.attendance import AttendanceLog, AttendanceStatus
from classlog.models.qr_session import QRSession
from classlog.models.student import Student
from classlog.services.analytics_service import AttendanceEvent
from classlog.services.qr_service import QRService, MalformedPayloadError
from classlog.services.session_liveness_service import ScanError, SCAN_MESSAGES
from classlog.utils.validators import Validator

logger = logging.getLogger(__name__)

MARKED = 'MARKED'

@dataclass
class CheckInResult:
    """Exactly one outcome per scan attempt."""
    code: str
    message: str
    attendance: Optional[AttendanceLog] = None

    @property
    def success(self) -> bool:
        return self.code == MARKED

    def to_dict(self) -> dict:
        data = {
            'success': self.success,
            'code': self.code,
            'message': self.message,
        }
        if self.attendance is not None:
            data['attendance'] = self.attendance.to_dict()
        return data

def _rejected(code: str) -> CheckInResult:
    return CheckInResult(code=code, message=SCAN_MESSAGES[code])

class AttendanceService:
    """Service for attendance marking operations."""

    @staticmethod
    def parse_status(status) -> AttendanceStatus:
        """Coerce 'present'/'absent'/'late' (or the enum) into AttendanceStatus."""
        if isinstance(status, AttendanceStatus):
            return status
        return Validator.validate_status(status)

    @staticmethod
    def check_in(student: Student, payload: str, controller) -> CheckInResult:
        """Validate a scanned payload against the session watermark and record presence."""
        try:
            token = QRService.parse_payload(payload, controller.separator)
        except MalformedPayloadError as e:
            logger.info("Malformed QR payload from student %s: %s", student.roll_no, e)
            return _rejected(ScanError.MALFORMED_PAYLOAD)

        scan = controller.validate_scan(token.session_id, token.timestamp_ms)
        if not scan.accepted:
            return _rejected(scan.reason)

        attendance, created = AttendanceService.record_attendance(
            student.id, int(token.session_id), AttendanceStatus.PRESENT
        )
        if not created:
            logger.info("Duplicate scan by student %s for session %s", student.roll_no, token.session_id)
            return _rejected(ScanError.ALREADY_MARKED)

        AttendanceService.update_session_average(attendance.session_id)
        return CheckInResult(code=MARKED, message='Attendance marked successfully!', attendance=attendance)

    @staticmethod
    def record_attendance(student_id: int, session_id: int, status,
                          marked_at: datetime = None) -> Tuple[AttendanceLog, bool]:
        """
        Insert the row for (student, session).
        Returns (row, created); an existing row is returned untouched.
        """
        now = datetime.now()
        attendance = AttendanceLog(
            student_id=student_id,
            session_id=session_id,
            date=now.date(),
            time=now.time().replace(microsecond=0),
            status=AttendanceService.parse_status(status),
            marked_at=marked_at or datetime.utcnow(),
        )
        try:
            db.session.add(attendance)
            db.session.commit()
            return attendance, True
        except IntegrityError:
            db.session.rollback()
            existing = AttendanceLog.query.filter_by(
                student_id=student_id, session_id=session_id
            ).first()
            if existing is None:
                raise
            return existing, False

    @staticmethod
    def mark_manual(student_id: int, session_id: int, status) -> Tuple[AttendanceLog, bool]:
        """
        Teacher override: set the status for (student, session).
        Returns (row, created); an existing row is updated in place.
        """
        attendance, created = AttendanceService.record_attendance(student_id, session_id, status)
        if not created:
            now = datetime.now()
            attendance.update(
                status=AttendanceService.parse_status(status),
                date=now.date(),
                time=now.time().replace(microsecond=0),
                marked_at=datetime.utcnow(),
            )

        AttendanceService.update_session_average(session_id)
        return attendance, created

    @staticmethod
    def update_session_average(session_id: int) -> Optional[float]:
        """Recompute qr_sessions.avg_attendance = present / students in group."""
        session = db.session.get(QRSession, session_id)
        if session is None:
            logger.warning("Session %s not found for attendance update", session_id)
            return None

        present_count = AttendanceLog.query.filter_by(
            session_id=session_id, status=AttendanceStatus.PRESENT
        ).count()
        total_students = Student.query.filter_by(group_name=session.group_name).count()

        average = (present_count / total_students * 100) if total_students > 0 else 0.0
        session.avg_attendance = average
        db.session.commit()

        logger.debug("Session %s attendance updated to %.2f%%", session_id, average)
        return average

    @staticmethod
    def session_roster(session_id: int) -> Tuple[Optional[List[dict]], Optional[str]]:
        """Every student of the session's group with their status for that session."""
        session = db.session.get(QRSession, session_id)
        if session is None:
            return None, "Session not found"

        rows = (
            db.session.query(Student, AttendanceLog.status)
            .outerjoin(
                AttendanceLog,
                and_(AttendanceLog.student_id == Student.id, AttendanceLog.session_id == session_id),
            )
            .filter(Student.group_name == session.group_name)
            .order_by(Student.roll_no)
            .all()
        )

        return [
            {
                'id': student.id,
                'name': student.name,
                'roll_no': student.roll_no,
                'email': student.email,
                'status': status.value if status else None,
            }
            for student, status in rows
        ], None

    @staticmethod
    def events_for_student(student_id: int) -> List[AttendanceEvent]:
        """The student's attendance log as analytics events."""
        logs = AttendanceLog.query.filter_by(student_id=student_id).all()
        return [
            AttendanceEvent(student_id=log.student_id, session_id=log.session_id, status=log.status.value)
            for log in logs
        ]
