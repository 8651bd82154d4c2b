"""Validation utilities for the application."""
from typing import Dict, List, Any
from classlog.models.attendance import AttendanceStatus

class ValidationError(Exception):
    """Custom validation error."""
    pass

class Validator:
    """Validation helper class."""

    @staticmethod
    def require_json(data: Any) -> Dict:
        """Ensure the request body is a JSON object."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be JSON")
        return data

    @staticmethod
    def require_fields(data: Dict, required_fields: List[str]) -> None:
        """Raise if any required field is missing or empty."""
        missing = [f for f in required_fields if data.get(f) in (None, '')]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    @staticmethod
    def validate_status(status: Any) -> AttendanceStatus:
        """Parse an attendance status string."""
        try:
            return AttendanceStatus(str(status).strip().lower())
        except ValueError:
            allowed = ', '.join(s.value for s in AttendanceStatus)
            raise ValidationError(f"Status must be one of: {allowed}")
