"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from vcoin.domain.throttle import LoginThrottle


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_login_throttle(request: Request) -> LoginThrottle:
    """Provide the process-wide login throttle owned by the app"""
    return request.app.state.login_throttle
