"""REST API for coopreg."""

from coopreg.api.app import create_app
from coopreg.api.models import APIResponse

__all__ = [
    "APIResponse",
    "create_app",
]
