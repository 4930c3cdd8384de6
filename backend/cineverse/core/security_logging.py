"""Security event logging utilities."""

from typing import Any

from fastapi import Request

from cineverse.common.request_id import get_request_id
from cineverse.core.logging import get_logger

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    if request.client:
        return request.client.host
    # Forwarded headers are client-supplied; only used when the socket peer is unknown
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return "unknown"


def log_security_event(
    request: Request,
    event_type: str,
    outcome: str,  # "allow", "deny"
    reason_code: str | None = None,
    user_id: str | None = None,
    **extra_fields: Any,
) -> None:
    """
    Log a security event with structured fields.

    Args:
        request: FastAPI request object
        event_type: Event type (e.g., "auth_signin", "role_gate")
        outcome: "allow" or "deny"
        reason_code: Error code if outcome is "deny"
        user_id: User ID if known
        **extra_fields: Additional fields to include
    """
    log_data = {
        "event_type": event_type,
        "request_id": get_request_id(request),
        "outcome": outcome,
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("User-Agent"),
        "path": request.url.path,
    }

    if user_id:
        log_data["user_id"] = user_id
    if reason_code:
        log_data["reason_code"] = reason_code

    log_data.update(extra_fields)

    if outcome == "deny":
        logger.warning("Security event: denied", extra=log_data)
    else:
        logger.info("Security event: allowed", extra=log_data)
