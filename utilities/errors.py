"""Error taxonomy shared by the domain modules and the HTTP layer.

Domain code raises these; routes.py turns every one of them into the
``{"success": False, "error": message}`` envelope with ``status_code``.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(AppError):
    status_code = 404


class ValidationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class AlreadyCompleted(AppError):
    status_code = 409


class StorageError(AppError):
    status_code = 500


class UploadError(AppError):
    status_code = 502
