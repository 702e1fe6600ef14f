"""
Centralized ID generation utilities.
"""
import uuid


def generate_request_id(prefix: str = "") -> str:
    """
    Generate a correlation ID for logging and for error responses.

    Args:
        prefix: Optional route label (e.g. "ddq" -> "ddq-550e8400-...")

    Returns:
        UUID string, prefixed when a prefix is given
    """
    request_id = str(uuid.uuid4())
    return f"{prefix}-{request_id}" if prefix else request_id
