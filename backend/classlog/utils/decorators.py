"""Custom decorators for role checks."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from classlog import db
from classlog.models.student import Student
from classlog.models.teacher import Teacher
from classlog.utils.helpers import error_response

def teacher_required(f):
    """Require a teacher token; the teacher is exposed as g.teacher."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('role') != 'teacher':
            return error_response("Teacher access required", 403)

        teacher = db.session.get(Teacher, int(get_jwt_identity()))
        if not teacher:
            return error_response("Teacher not found", 404)

        g.teacher = teacher
        return f(*args, **kwargs)
    return decorated_function

def student_required(f):
    """Require a student token; the student is exposed as g.student."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('role') != 'student':
            return error_response("Student access required", 403)

        student = db.session.get(Student, int(get_jwt_identity()))
        if not student:
            return error_response("Student not found", 404)

        g.student = student
        return f(*args, **kwargs)
    return decorated_function
