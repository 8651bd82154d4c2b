"""QR session API endpoints for teachers."""
from datetime import date
from flask import Blueprint, current_app, g, request
from classlog import db
from classlog.models.qr_session import QRSession
from classlog.models.student import Student
from classlog.models.teacher import TeacherGroup
from classlog.services.attendance_service import AttendanceService
from classlog.services.qr_service import QRService
from classlog.utils.decorators import teacher_required
from classlog.utils.helpers import success_response, error_response
from classlog.utils.validators import Validator, ValidationError

sessions_bp = Blueprint('sessions', __name__)

def _controller():
    return current_app.extensions['session_liveness']

def _owned_session(session_id: int):
    session = db.session.get(QRSession, session_id)
    if session is None:
        return None, error_response("Session not found", 404)
    if session.teacher_id != g.teacher.id:
        return None, error_response("You can only manage your own sessions", 403)
    return session, None

@sessions_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Session service is running')

@sessions_bp.route('', methods=['POST'])
@teacher_required
def start_session():
    """Create a session for a group and subject and start rotating its QR token."""
    data = Validator.require_json(request.get_json(silent=True))
    Validator.require_fields(data, ['group_name', 'subject'])

    group_name = str(data['group_name']).strip()
    subject = str(data['subject']).strip()
    if not g.teacher.handles(group_name, subject):
        return error_response("You are not assigned to this group and subject", 403)

    session_date = date.today()
    if data.get('date'):
        try:
            session_date = date.fromisoformat(data['date'])
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

    controller = _controller()
    session_id = controller.store.create_session(
        teacher_id=g.teacher.id,
        group_name=group_name,
        subject=subject,
        session_date=session_date,
        name=data.get('name'),
        renewed_at_ms=controller.clock(),
    )
    handle = controller.start_session(session_id)
    current_app.logger.info('Teacher %s started session %s for %s/%s',
                            g.teacher.id, session_id, group_name, subject)

    return success_response(
        data={
            'session': db.session.get(QRSession, session_id).to_dict(),
            'rotation': handle.to_dict(),
            'qr_image': QRService.render_qr_image(handle.current_token),
        },
        message="Session started",
        status_code=201
    )

@sessions_bp.route('/<int:session_id>/stop', methods=['POST'])
@teacher_required
def stop_session(session_id):
    """Stop rotation and close the session."""
    session, error = _owned_session(session_id)
    if error:
        return error

    controller = _controller()
    handle = controller.get_handle(session_id)
    if handle is not None:
        controller.stop_session(handle)
    else:
        controller.store.deactivate(session_id)

    return success_response(
        data=db.session.get(QRSession, session_id).to_dict(),
        message="Session stopped"
    )

@sessions_bp.route('/<int:session_id>/token', methods=['GET'])
@teacher_required
def current_token(session_id):
    """Current rotating token and its QR image, for display."""
    session, error = _owned_session(session_id)
    if error:
        return error

    handle = _controller().get_handle(session_id)
    if handle is None or not handle.is_running:
        return error_response("Session is not active", 404)

    data = handle.to_dict()
    data['qr_image'] = QRService.render_qr_image(handle.current_token)
    return success_response(data=data)

@sessions_bp.route('/groups', methods=['GET'])
@teacher_required
def teacher_groups():
    """Groups and subjects assigned to the current teacher."""
    groups = [
        {'group_name': tg.group_name, 'subject': tg.subject}
        for tg in g.teacher.groups.order_by(TeacherGroup.group_name, TeacherGroup.subject).all()
    ]
    return success_response(data={'groups': groups})

@sessions_bp.route('/group/<group_name>', methods=['GET'])
@teacher_required
def group_sessions(group_name):
    """Sessions the current teacher ran for a group, newest first."""
    sessions = (
        QRSession.query
        .filter_by(teacher_id=g.teacher.id, group_name=group_name)
        .order_by(QRSession.date.desc(), QRSession.id.desc())
        .all()
    )
    return success_response(data={'sessions': [s.to_dict() for s in sessions]})

@sessions_bp.route('/<int:session_id>/roster', methods=['GET'])
@teacher_required
def session_roster(session_id):
    """Students of the session's group with their attendance status."""
    session, error = _owned_session(session_id)
    if error:
        return error

    students, error_msg = AttendanceService.session_roster(session_id)
    if error_msg:
        return error_response(error_msg, 404)
    return success_response(data={'students': students})

@sessions_bp.route('/<int:session_id>/mark', methods=['POST'])
@teacher_required
def mark_attendance(session_id):
    """Manually mark or update a student's attendance."""
    session, error = _owned_session(session_id)
    if error:
        return error

    data = Validator.require_json(request.get_json(silent=True))
    Validator.require_fields(data, ['roll_no', 'status'])
    status = Validator.validate_status(data['status'])

    student = Student.query.filter_by(roll_no=str(data['roll_no']).strip()).first()
    if not student:
        return error_response("Student not found", 404)

    attendance, created = AttendanceService.mark_manual(student.id, session_id, status)
    return success_response(
        data=attendance.to_dict(),
        message="Attendance marked successfully." if created else "Attendance updated successfully."
    )
