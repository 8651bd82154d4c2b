"""Authentication service for students and teachers."""
from flask_jwt_extended import create_access_token
from classlog.models.student import Student
from classlog.models.teacher import Teacher

class AuthService:
    @staticmethod
    def login_student(roll_no: str, password: str) -> tuple[dict, str]:
        """Authenticate a student by roll number and return an access token."""
        if not roll_no or not password:
            return None, "Roll number and password are required"

        student = Student.query.filter_by(roll_no=roll_no.strip()).first()
        if not student or not student.check_password(password):
            return None, "Invalid credentials"

        access_token = create_access_token(
            identity=str(student.id),
            additional_claims={'role': 'student'}
        )
        return {
            "access_token": access_token,
            "user": student.to_dict(),
            "role": "student"
        }, None

    @staticmethod
    def login_teacher(email: str, password: str) -> tuple[dict, str]:
        """Authenticate a teacher by email and return an access token."""
        if not email or not password:
            return None, "Email and password are required"

        teacher = Teacher.query.filter_by(email=email.lower().strip()).first()
        if not teacher or not teacher.check_password(password):
            return None, "Invalid credentials"

        access_token = create_access_token(
            identity=str(teacher.id),
            additional_claims={'role': 'teacher'}
        )
        return {
            "access_token": access_token,
            "user": teacher.to_dict(),
            "role": "teacher"
        }, None
