class DriveGateError(Exception):
    """Base class for all drivegate exceptions."""
    pass

class ValidationError(DriveGateError):
    """Raised when client input is missing or malformed."""
    pass

class ConfigurationError(DriveGateError):
    """Raised when credentials or configuration are missing or invalid."""
    pass

class StagingError(DriveGateError):
    """Raised when a local scratch file cannot be written, moved or removed."""
    pass

class LocalFileNotFoundError(DriveGateError):
    """Raised when a local-only file lookup finds nothing."""

    def __init__(self, filename: str):
        super().__init__(f"File not found: {filename}")
        self.filename = filename

class RemoteOperationError(DriveGateError):
    """Raised when a Drive API call fails. Carries the action name and cause."""

    def __init__(self, action: str, cause: Exception):
        super().__init__(f"Drive operation '{action}' failed: {cause}")
        self.action = action
        self.cause = cause

class RetryExhaustedError(RemoteOperationError):
    """Raised when a transient Drive failure outlasts every retry attempt."""

    def __init__(self, action: str, cause: Exception, attempts: int):
        super().__init__(action, cause)
        self.attempts = attempts

    def __str__(self):
        return f"Drive operation '{self.action}' failed after {self.attempts} attempts: {self.cause}"

class PermissionGrantError(RemoteOperationError):
    """Raised when a file was created but could not be made publicly readable.

    The file exists in Drive with the pending-grant mark and is picked up by
    the next reconciliation pass.
    """

    def __init__(self, file_id: str, cause: Exception):
        super().__init__("grant", cause)
        self.file_id = file_id
