"""
Mapping of Supabase/PostgREST failures onto HTTP errors.

Every failure surfaces to the caller as one of three categories:
unauthorized (401/403), not found (404) or backend error (409/500).
"""

import logging

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "You are not authorized to perform this action"
NOT_FOUND_MESSAGE = "The requested item was not found"
BACKEND_ERROR_MESSAGE = "Something went wrong. Please try again"

# Postgres / PostgREST error codes the dashboard distinguishes
_ERROR_CODE_MAP = {
    "23505": (status.HTTP_409_CONFLICT, "This item already exists"),
    "23503": (status.HTTP_404_NOT_FOUND, "Related record not found"),
    "42501": (status.HTTP_403_FORBIDDEN, UNAUTHORIZED_MESSAGE),
    "PGRST116": (status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE),
}


def handle_supabase_error(error: Exception, context: str = "") -> HTTPException:
    """Translate a backend exception into an HTTPException to raise."""
    if isinstance(error, HTTPException):
        return error
    code = getattr(error, "code", None)
    logger.error(f"Supabase error{f' ({context})' if context else ''}: code={code} {error}")
    if code in _ERROR_CODE_MAP:
        status_code, detail = _ERROR_CODE_MAP[code]
        return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=BACKEND_ERROR_MESSAGE)


def not_found(resource: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")


def forbidden(detail: str = UNAUTHORIZED_MESSAGE) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
