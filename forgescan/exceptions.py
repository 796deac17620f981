"""forgescan exception classes."""


class ForgeScanError(Exception):
    """Base exception for all forgescan errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(ForgeScanError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(ForgeScanError):
    """Raised when the forge rejects the credentials (401)."""

    pass


class AuthorizationError(ForgeScanError):
    """Raised when access is denied (403)."""

    pass


class NotFoundError(ForgeScanError):
    """Raised when a resource is not found."""

    pass


class RateLimitedError(ForgeScanError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(ForgeScanError):
    """Raised on rejected requests and unparseable webhook payloads."""

    pass


class ServerError(ForgeScanError):
    """Raised on server errors (5xx) and undecodable responses."""

    pass


class NetworkError(ForgeScanError):
    """Raised when a request never produced a response."""

    pass


class DiscoveryCancelledError(ForgeScanError):
    """Raised for work skipped because the run was cancelled."""

    def __init__(self, message: str = "discovery cancelled") -> None:
        super().__init__("CANCELLED", message)


class ForgeOperationError(ForgeScanError):
    """A forge-level operation failed; the original error is the ``__cause__``."""

    def __init__(self, forge_name: str, operation: str, message: str) -> None:
        super().__init__("FORGE_OPERATION_FAILED", f"{forge_name}: {operation}: {message}")
        self.forge_name = forge_name
        self.operation = operation
