"""Custom error classes."""


class SwapClassifierError(Exception):
    """Base exception for the swap classifier."""
    pass


class InvalidTransactionError(SwapClassifierError):
    """Transaction payload is missing required fields or is malformed."""
    pass


class ConfigurationError(SwapClassifierError):
    """Classifier configuration is invalid."""
    pass


class StorageMappingError(SwapClassifierError):
    """A classifier result cannot be mapped to persisted records."""
    pass


class RecordValidationError(SwapClassifierError):
    """A persisted record violates a storage invariant."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class SplitPersistenceError(SwapClassifierError):
    """Atomic write of a split pair failed and was rolled back."""
    pass
