from __future__ import annotations
"""Domain error taxonomy shared by services and route handlers.

Services raise these instead of calling ``abort`` so they can be exercised
without a request context. The app level error handler turns them into the
uniform failure envelope::

    {"success": false, "message": "...", "error": {"status": 400, "title": "Bad Request", "detail": "...", "kind": "InvalidArgument"}}
"""
from typing import Any, Optional


class ServiceError(Exception):
    status_code = 500
    title = 'Internal Server Error'

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self):
        return {
            'status': self.status_code,
            'title': self.title,
            'detail': self.detail,
            'kind': self.kind,
        }


class InvalidArgument(ServiceError):
    """Malformed id, unparseable date, unsupported period/format, empty required list."""
    status_code = 400
    title = 'Bad Request'


class Unauthorized(ServiceError):
    status_code = 401
    title = 'Unauthorized'


class Forbidden(ServiceError):
    status_code = 403
    title = 'Forbidden'


class NotFound(ServiceError):
    """Target id does not resolve inside the caller's tenant."""
    status_code = 404
    title = 'Not Found'


class NoOp(ServiceError):
    """A bulk operation matched nothing it could modify."""
    status_code = 409
    title = 'Conflict'


__all__ = ['ServiceError', 'InvalidArgument', 'Unauthorized', 'Forbidden', 'NotFound', 'NoOp']
