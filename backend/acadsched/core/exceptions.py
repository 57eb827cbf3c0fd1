class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationFailed(AppError):
    """Raised when a save or submit is blocked; lists every offending slot."""
    def __init__(self, message: str, issues: list[dict]):
        super().__init__(message, status_code=422, details={"issues": issues})
        self.issues = issues

class PlacementRejectedError(AppError):
    """Surfaces a rejected grid edit to the HTTP caller."""
    def __init__(self, reason: str, key: str, subject: str | None = None, message: str | None = None):
        details = {"reason": reason, "key": key, "subject": subject}
        super().__init__(message or f"Placement at {key} rejected: {reason}", status_code=409, details=details)
        self.reason = reason

class ScheduleLockedError(AppError):
    """Raised when a submitted or archived schedule is modified."""
    def __init__(self, schedule_id: str, status: str):
        super().__init__(
            f"Schedule {schedule_id} is {status} and cannot be modified",
            status_code=409,
            details={"schedule_id": schedule_id, "status": status},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class PersistenceFailure(AppError):
    """Raised when the store rejects a write; the request can be retried unchanged."""
    def __init__(self, message: str):
        super().__init__(message, status_code=503)

class TimeAxisError(AppError, ValueError):
    """Raised for an unknown time label or day coming from stored data."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
