"""Error taxonomy for the composition pipeline."""


class StorybeatError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(StorybeatError):
    """Project configuration or control value is missing or out of range.

    Raised before any external call is made.
    """

    def __init__(self, errors: list[str] | str):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class CollaboratorError(StorybeatError):
    """An external service failed or returned an unusable result."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message


class StateError(StorybeatError):
    """Operation invoked in a lifecycle state that does not allow it."""

    def __init__(self, operation: str, status: str, message: str):
        super().__init__(f"{operation} not allowed in status '{status}': {message}")
        self.operation = operation
        self.status = status
        self.message = message
