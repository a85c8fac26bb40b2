"""Custom exception classes for the application."""


class PartPickerException(Exception):
    """Base exception for all PartPicker errors."""

    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(PartPickerException):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class BuildNotFoundError(NotFoundError):
    """Raised when a shared build id is unknown or has expired."""

    def __init__(self, build_id: str):
        self.build_id = build_id
        PartPickerException.__init__(self, "Build not found")


class UnauthorizedError(PartPickerException):
    """Raised when a protected trigger is called without the right secret."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class BadRequestError(PartPickerException):
    """Raised when a request is missing a required parameter or has a malformed body."""

    status_code = 400
