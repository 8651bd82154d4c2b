"""Attendance API endpoints for students."""
from flask import Blueprint, current_app, g, request
from classlog import limiter
from classlog.services.attendance_service import AttendanceService
from classlog.services.session_liveness_service import ScanError
from classlog.utils.decorators import student_required
from classlog.utils.helpers import success_response, error_response
from classlog.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/scan', methods=['POST'])
@student_required
@limiter.limit("30 per minute")
def scan():
    """Mark attendance from a decoded QR payload '<sessionId>_<millis>'."""
    data = Validator.require_json(request.get_json(silent=True))
    Validator.require_fields(data, ['payload'])

    result = AttendanceService.check_in(
        g.student, data['payload'], current_app.extensions['session_liveness']
    )

    # a duplicate scan is a benign notice, not a failure
    if result.success or result.code == ScanError.ALREADY_MARKED:
        return success_response(data=result.to_dict(), message=result.message)
    return error_response(result.message, 400, data=result.to_dict())
