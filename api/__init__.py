"""HTTP interface for service orders."""

from api.app import create_app
from api.base import (
    APIError,
    APIResponse,
    ErrorCodes,
    error_response,
    success_response,
)
