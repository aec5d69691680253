"""
Domain exceptions for the build pipeline.

Parse failures are not exceptions: malformed model output yields no steps.
"""


class BackendError(Exception):
    """
    Raised when a template or chat request is rejected or cannot be sent.

    Callers catch this at the request site, log it and reset their loading
    state. There is no automatic retry.
    """

    def __init__(self, message: str, status_code: int | None = None):
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status of the rejected request, if one was received
        """
        super().__init__(message)
        self.status_code = status_code


class SandboxError(Exception):
    """Raised by sandbox adapters when a mount or spawn cannot be carried out."""


class PathConflictError(ValueError):
    """
    Raised when a merge would give one path two different node kinds.

    Example: ``src`` already exists as a file and a step creates ``src/app.js``.
    """

    def __init__(self, path: str, existing: str, requested: str):
        super().__init__(
            f"Path '{path}' is a {existing}, cannot use it as a {requested}"
        )
        self.path = path
        self.existing = existing
        self.requested = requested
