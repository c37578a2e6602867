class ScorebookError(Exception):
    """Base for all domain errors."""


class InvalidInput(ScorebookError):
    """Malformed or out-of-range input. Not retryable."""


class NotFound(ScorebookError):
    """Referenced entity does not exist."""


class ConstraintViolation(ScorebookError):
    """Input conflicts with an existing row or a domain invariant. Not retryable."""


class TransactionFailure(ScorebookError):
    """The store aborted mid-transaction; nothing was committed. Safe to retry."""
