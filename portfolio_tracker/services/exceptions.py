# portfolio_tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
or presentation knowledge. Alerting and retry prompts belong to the UI layer.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidTransactionError
    ├── NotFoundError
    │   └── TransactionNotFoundError
    ├── MissingQuoteError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   ├── InstrumentNotFoundError
    │   ├── RateLimitError
    │   └── QuoteParseError
    └── StorageError

MissingQuoteError is recoverable: the valuation core catches it and values
the instrument at its invested amount. It never reaches callers of the
valuation or snapshot services.
"""

from typing import Any


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidTransactionError(ValidationError):
    """
    Raised when a transaction record cannot be validated for its asset class.

    Attributes:
        asset_class: Asset class id the record was read for
        errors: Validation error details (pydantic format)
    """

    def __init__(
            self,
            asset_class: str,
            reason: str,
            errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.asset_class = asset_class
        self.errors = errors or []
        super().__init__(f"Invalid {asset_class} transaction: {reason}")


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Transaction")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class TransactionNotFoundError(NotFoundError):
    """Raised when deleting a transaction id that is not in its list."""

    def __init__(self, asset_class: str, transaction_id: str) -> None:
        self.asset_class = asset_class
        self.transaction_id = transaction_id
        super().__init__(
            f"Transaction '{transaction_id}' not found in {asset_class}",
            resource_type="Transaction",
            resource_id=transaction_id,
        )


# =============================================================================
# QUOTES
# =============================================================================


class MissingQuoteError(ServiceError):
    """
    Raised when no live price/NAV is available for an instrument.

    Recoverable: valuation falls back to the invested amount.

    Attributes:
        asset_class: Asset class id
        instrument_id: Symbol, scheme code or coin id
    """

    def __init__(self, asset_class: str, instrument_id: str) -> None:
        self.asset_class = asset_class
        self.instrument_id = instrument_id
        super().__init__(f"No live quote for {asset_class} instrument '{instrument_id}'")


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a market data provider is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class InstrumentNotFoundError(MarketDataError):
    """
    Raised when the provider does not know the instrument.

    This is NOT a retryable error.
    """

    def __init__(self, instrument_id: str, provider: str) -> None:
        message = f"Instrument '{instrument_id}' not found by {provider}"
        super().__init__(message, provider=provider)
        self.instrument_id = instrument_id


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class QuoteParseError(MarketDataError):
    """Raised when a provider response does not contain a usable quote."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Could not parse quote from '{provider}': {reason}", provider=provider)
        self.reason = reason


# =============================================================================
# STORAGE
# =============================================================================


class StorageError(ServiceError):
    """
    Raised when the key-value store cannot be read or written.

    Attributes:
        key: Storage key involved (if any)
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


__all__ = [
    "ServiceError",
    "ValidationError",
    "InvalidTransactionError",
    "NotFoundError",
    "TransactionNotFoundError",
    "MissingQuoteError",
    "MarketDataError",
    "ProviderUnavailableError",
    "InstrumentNotFoundError",
    "RateLimitError",
    "QuoteParseError",
    "StorageError",
]
