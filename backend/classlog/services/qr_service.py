"""QR token construction, parsing and rendering."""
import qrcode
import io
import base64
import re
from typing import NamedTuple

DEFAULT_SEPARATOR = '_'

_TIMESTAMP_PATTERN = re.compile(r'^[+-]?\d+$')

class MalformedPayloadError(ValueError):
    """Raised when a scanned payload is not '<sessionId><sep><millis>'."""
    pass

class ParsedToken(NamedTuple):
    session_id: str
    timestamp_ms: int

class QRService:
    """Service for QR token operations."""

    @staticmethod
    def build_token(session_id, timestamp_ms: int, separator: str = DEFAULT_SEPARATOR) -> str:
        """Join a session id and an issue timestamp into the QR payload."""
        return f"{session_id}{separator}{int(timestamp_ms)}"

    @staticmethod
    def parse_payload(payload: str, separator: str = DEFAULT_SEPARATOR) -> ParsedToken:
        """
        Split a decoded QR payload on the first separator.
        Raises MalformedPayloadError unless it yields a non-empty session id
        and an integer millisecond timestamp.
        """
        if not isinstance(payload, str):
            raise MalformedPayloadError("Payload must be a string")

        parts = payload.strip().split(separator, 1)
        if len(parts) != 2:
            raise MalformedPayloadError("Missing separator")

        session_id, raw_timestamp = parts
        if not session_id:
            raise MalformedPayloadError("Missing session id")

        if not _TIMESTAMP_PATTERN.match(raw_timestamp):
            raise MalformedPayloadError("Timestamp is not an integer")

        return ParsedToken(session_id, int(raw_timestamp))

    @staticmethod
    def render_qr_image(token: str) -> str:
        """Render a token as a PNG data URI for display."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(token)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
