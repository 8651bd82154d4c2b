"""Relational persistence for QR sessions."""
from dataclasses import dataclass
from datetime import date as date_type
from typing import List, Optional
from classlog import db
from classlog.models.qr_session import QRSession

@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session row at lookup time."""
    id: int
    group_name: str
    subject: str
    active: bool
    last_renewed_at: int
    teacher_id: Optional[int] = None
    name: Optional[str] = None
    date: Optional[date_type] = None

    @classmethod
    def from_model(cls, session: QRSession) -> 'SessionSnapshot':
        return cls(
            id=session.id,
            group_name=session.group_name,
            subject=session.subject,
            active=bool(session.is_active),
            last_renewed_at=session.last_renewed_at or 0,
            teacher_id=session.teacher_id,
            name=session.name,
            date=session.date,
        )

MAX_ID = 2 ** 63 - 1

def _coerce_id(session_id) -> Optional[int]:
    """Primary key for a session id, or None if no row could have it."""
    try:
        pk = int(session_id)
    except (TypeError, ValueError):
        return None
    # ids beyond a signed 64-bit column cannot exist
    if not -MAX_ID - 1 <= pk <= MAX_ID:
        return None
    return pk

class SessionStore:
    """SQLAlchemy-backed store used by the rotation controller and analytics."""

    def create_session(self, teacher_id: int, group_name: str, subject: str,
                       session_date: date_type = None, name: str = None,
                       renewed_at_ms: int = 0) -> int:
        """Insert a new active session and return its id."""
        session = QRSession(
            teacher_id=teacher_id,
            group_name=group_name,
            subject=subject,
            name=name,
            date=session_date or date_type.today(),
            last_renewed_at=renewed_at_ms,
            is_active=True,
        )
        session.save()
        return session.id

    def get_session(self, session_id) -> Optional[SessionSnapshot]:
        """Fresh read of a session, or None if it does not exist."""
        pk = _coerce_id(session_id)
        if pk is None:
            return None

        session = db.session.get(QRSession, pk, populate_existing=True)
        if session is None:
            return None
        return SessionSnapshot.from_model(session)

    def set_last_renewed_at(self, session_id, timestamp_ms: int) -> None:
        """Advance the watermark. Older timestamps never overwrite newer ones."""
        pk = _coerce_id(session_id)
        try:
            db.session.query(QRSession).filter(
                QRSession.id == pk,
                QRSession.last_renewed_at < timestamp_ms,
            ).update({'last_renewed_at': timestamp_ms}, synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def deactivate(self, session_id) -> None:
        """Clear the active flag. The row is kept for history."""
        pk = _coerce_id(session_id)
        try:
            db.session.query(QRSession).filter(QRSession.id == pk).update(
                {'is_active': False}, synchronize_session=False
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def list_sessions(self, group_name: str, subject: str = None) -> List[SessionSnapshot]:
        """Sessions for a group, optionally restricted to one subject."""
        query = QRSession.query.filter_by(group_name=group_name)
        if subject is not None:
            query = query.filter_by(subject=subject)
        return [SessionSnapshot.from_model(s) for s in query.order_by(QRSession.id).all()]
