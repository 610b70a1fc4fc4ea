class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidQRCodeError(ValidationError):
    """Raised when a scanned QR payload is not one of the office codes."""


class AuthenticationError(DomainError):
    """Raised when login credentials or the bearer token are invalid."""


class AccountPendingError(DomainError):
    """Raised when an employee logs in before an admin verified the account."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised for an unknown employee or record id."""


class ConflictError(DomainError):
    """Raised when a concurrent update won the race (or a unique value is taken)."""


class CooldownError(DomainError):
    """Raised when a scan arrives inside the employee's cooldown window."""

    def __init__(self, remaining_seconds: int):
        super().__init__(f"Scan rejected, wait {remaining_seconds}s before scanning again")
        self.remaining_seconds = int(remaining_seconds)


class StoreUnavailableError(DomainError):
    """Raised when persistence fails transiently; callers may retry."""
