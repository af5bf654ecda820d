class ResolveError(Exception):
    """Base exception for the Resolve decision-log backend."""

    pass


class QuotaExceededError(ResolveError):
    """Raised when creating a log would exceed the free-tier active-log limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Free tier limit reached. You can only have {limit} active decision logs.")


class PersistenceError(ResolveError):
    """Raised when the durable slot cannot be read or written."""

    pass


class DeserializationError(ResolveError):
    """Raised when the durable slot holds data that cannot be decoded into decision logs."""

    pass


class FormValidationError(ResolveError):
    """Raised when raw form input fails field-level validation."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
