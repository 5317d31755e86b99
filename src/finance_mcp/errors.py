"""Error taxonomy for the data access layer."""


class FinanceDataError(Exception):
    """Base class for every error raised by the data access layer."""

    error_type = "data_unavailable"


class ConfigurationError(FinanceDataError):
    """Raised when a credential or setting is missing or invalid."""

    error_type = "configuration_error"


class InvalidSymbolError(FinanceDataError):
    """Raised when a symbol is malformed or the provider knows nothing about it."""

    error_type = "invalid_symbol"

    def __init__(self, message: str, symbol: str | None = None):
        super().__init__(message)
        self.symbol = symbol


class MalformedResponseError(FinanceDataError):
    """Raised when a provider payload lacks required fields or cannot be parsed."""

    error_type = "malformed_response"


class UpstreamError(FinanceDataError):
    """Raised when a provider rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamServerError(UpstreamError):
    """Raised on provider 5xx responses. Retryable."""


class QuotaExceededError(UpstreamError):
    """Raised when a provider reports that its request quota is used up."""

    error_type = "rate_limited"


class NetworkError(FinanceDataError):
    """Raised when no response was received (timeout, connection failure). Retryable."""


class BatchFailedError(FinanceDataError):
    """Raised by opt-in strict comparisons when no symbol in the batch resolved."""

    def __init__(self, message: str, failures: dict[str, str]):
        super().__init__(message)
        self.failures = failures


RETRYABLE_ERRORS: tuple[type[FinanceDataError], ...] = (NetworkError, UpstreamServerError)
