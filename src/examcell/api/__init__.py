"""REST API for the examination cell portal."""

from examcell.api.app import create_app
from examcell.api.models import (
    APIResponse,
    AuthResponse,
    PageResponse,
)

__all__ = [
    "APIResponse",
    "AuthResponse",
    "PageResponse",
    "create_app",
]
