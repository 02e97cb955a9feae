"""Custom exception classes for FinSight."""


class FinSightError(Exception):
    """Base exception for FinSight."""
    status_code = 500


class ConfigurationError(FinSightError):
    """Missing or invalid configuration."""
    status_code = 500


class UnauthorizedError(FinSightError):
    """Missing or invalid bearer token."""
    status_code = 401


class NotFoundOrForbiddenError(FinSightError):
    """Resource absent or not owned by the caller."""
    status_code = 404


class ValidationError(FinSightError):
    """Data validation errors."""
    status_code = 400


class InvalidAmountError(ValidationError):
    """Amount outside the accepted range."""
    pass


class CategoryNotFoundError(FinSightError):
    """Budget category id did not match any category."""
    status_code = 404


class DuplicateCategoryError(ValidationError):
    """A category with the same name already exists."""
    pass


class InsufficientFundsError(FinSightError):
    """Transfer exceeds the source allocation."""
    status_code = 409


class PDFError(FinSightError):
    """PDF extraction errors."""
    status_code = 422


class StorageError(FinSightError):
    """Object storage errors."""
    status_code = 500


class ExternalServiceError(FinSightError):
    """Language-model API errors."""
    status_code = 502


# Retryable errors
class RetryableError(FinSightError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableExternalServiceError(RetryableError, ExternalServiceError):
    """Language-model API errors that can be retried."""
    pass
