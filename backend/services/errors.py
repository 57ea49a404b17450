class CommentError(Exception):
    """Base comment error, carrying a stable envelope code."""

    code = 1200

    def __init__(self, message: str, code: int = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class ValidationError(CommentError):
    """Required fields missing or malformed."""
    code = 1201

    def __init__(self, message: str = "required fields missing"):
        super().__init__(message)


class AuthorizationError(CommentError):
    """Requester does not own the comment."""
    code = 1203

    def __init__(self, message: str = "operation failed"):
        super().__init__(message)


class FilterError(CommentError):
    """Sensitive-word list could not be loaded."""
    code = 1204


class StorageError(CommentError):
    """Underlying database operation failed."""
    code = 1205

    def __init__(self, message: str = "storage unavailable"):
        super().__init__(message)
