"""
Error types raised by routes and services.

Every ApiError is turned into a ``{"error": message}`` JSON body with the
matching status code by the handler registered in app.py.
"""


class ApiError(Exception):
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class BadRequest(ApiError):
    status = 400


class Unauthorized(ApiError):
    status = 401


class Forbidden(ApiError):
    status = 403


class NotFound(ApiError):
    status = 404
