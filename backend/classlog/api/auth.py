"""Authentication API endpoints."""
from flask import Blueprint, request
from classlog import limiter
from classlog.services.auth_service import AuthService
from classlog.utils.helpers import success_response, error_response
from classlog.utils.validators import Validator

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    """Login for students (roll number) and teachers (email)."""
    data = Validator.require_json(request.get_json(silent=True))
    Validator.require_fields(data, ["user_type", "password"])

    user_type = str(data["user_type"]).strip().lower()
    if user_type == "student":
        result, error = AuthService.login_student(str(data.get("id", "")), data["password"])
    elif user_type == "teacher":
        result, error = AuthService.login_teacher(str(data.get("email", "")), data["password"])
    else:
        return error_response("user_type must be 'student' or 'teacher'", 400)

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Login successful")
