"""Custom exceptions for Nightwatch."""


class NightwatchError(Exception):
    """Base exception for all Nightwatch errors."""


class ConfigError(NightwatchError):
    """Configuration-related errors."""


class EventError(NightwatchError):
    """The change under evaluation could not be resolved."""


class CollaboratorError(NightwatchError):
    """An external call (git, GitHub) failed."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConflictDetectionError(CollaboratorError):
    """Raised when conflict detection aborts on a failed file-list fetch."""

    def __init__(self, change_id: int, detail: str = ""):
        self.change_id = change_id
        super().__init__(f"Fetching files of change #{change_id}", detail)
