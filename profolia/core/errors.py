class AppError(Exception):
    """Base error carrying the HTTP status a request-level failure maps to."""

    status_code: int = 500
    code: str = "AppError"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        if status_code is not None:
            self.status_code = status_code


class InvalidArchive(AppError):
    status_code = 400
    code = "InvalidArchive"


class UnsupportedType(AppError):
    status_code = 415
    code = "UnsupportedType"


class StorageError(AppError):
    status_code = 502
    code = "StorageError"


class ClassificationError(AppError):
    status_code = 502
    code = "ClassificationError"


class PersistenceError(AppError):
    status_code = 500
    code = "PersistenceError"


class NotFound(AppError):
    status_code = 404
    code = "NotFound"


class EntryTooLarge(AppError):
    status_code = 413
    code = "EntryTooLarge"
