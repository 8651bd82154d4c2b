"""Attendance statistics API endpoints."""
from flask import Blueprint, g
from classlog.services.statistics_service import StatisticsService
from classlog.utils.decorators import student_required, teacher_required
from classlog.utils.helpers import success_response, error_response

statistics_bp = Blueprint('statistics', __name__)

@statistics_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Statistics service is running')

@statistics_bp.route('/me', methods=['GET'])
@student_required
def my_statistics():
    """Per-subject attendance for the logged-in student."""
    report, error = StatisticsService.student_report(g.student.roll_no)
    if error:
        return error_response(error, 404)
    return success_response(data=report)

@statistics_bp.route('/students/<roll_no>', methods=['GET'])
@teacher_required
def student_statistics(roll_no):
    """Per-subject attendance for any student."""
    report, error = StatisticsService.student_report(roll_no)
    if error:
        return error_response(error, 404)
    return success_response(data=report)
