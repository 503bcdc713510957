"""
Exception definitions for the rollup Web SDK
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for Web SDK operations

    1xxx - Wallet provider errors
    3xxx - Rollup provider errors
    4xxx - SDK facade errors
    5xxx - Initialization errors
    9xxx - Configuration errors
    """
    # Wallet provider errors
    PROVIDER_INIT_FAILED = "1001"
    PROVIDER_REQUEST_FAILED = "1002"
    ACCOUNT_ACCESS_WITHDRAWN = "1003"
    ACCOUNT_NOT_LINKED = "1004"

    # Rollup provider errors (recoverable)
    ROLLUP_PROVIDER_UNREACHABLE = "3001"
    ROLLUP_PROVIDER_TIMEOUT = "3002"
    ROLLUP_PROVIDER_INVALID_RESPONSE = "3003"

    # SDK facade errors
    SDK_INIT_FAILED = "4001"

    # Initialization errors
    INIT_FAILED = "5001"
    INIT_ABORTED = "5002"
    INIT_IN_PROGRESS = "5003"
    ACCOUNT_LINK_FAILED = "5004"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class WebSdkError(Exception):
    """
    Base exception for all Web SDK errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class ProviderError(WebSdkError):
    """
    Wallet provider errors

    Raised when:
    - The provider rejects or fails a JSON-RPC request
    - The provider returns a malformed chain id or account list
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PROVIDER_REQUEST_FAILED,
        original_error: Optional[Exception] = None,
        method: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            original_error=original_error,
            details={"method": method} if method else None,
        )
        self.method = method

    @classmethod
    def request_failed(cls, method: str, error: Exception) -> "ProviderError":
        return cls(
            f"Provider request '{method}' failed: {error}",
            ErrorCode.PROVIDER_REQUEST_FAILED,
            original_error=error,
            method=method,
        )

    @classmethod
    def invalid_response(cls, method: str, value: object) -> "ProviderError":
        return cls(
            f"Provider returned an invalid response for '{method}': {value!r}",
            ErrorCode.PROVIDER_REQUEST_FAILED,
            method=method,
        )


class AccountAccessWithdrawn(WebSdkError):
    """
    The provider reported no account - not recoverable

    Raised when:
    - The user disconnects the site from the wallet
    - The wallet is locked and exposes no accounts
    """

    def __init__(self, message: str = "Account access withdrawn."):
        super().__init__(message, ErrorCode.ACCOUNT_ACCESS_WITHDRAWN, recoverable=False)


class AccountNotLinked(WebSdkError):
    """
    No account is linked to the coordinator

    Raised when:
    - get_user() is called before an account was linked or after destroy()
    """

    def __init__(self, message: str = "No account is linked."):
        super().__init__(message, ErrorCode.ACCOUNT_NOT_LINKED, recoverable=False)


class RollupProviderError(WebSdkError):
    """
    Rollup provider status errors - typically recoverable

    Raised when:
    - The status endpoint cannot be reached
    - The request times out
    - The response is not a valid status document
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ROLLUP_PROVIDER_UNREACHABLE,
        original_error: Optional[Exception] = None,
        server_url: Optional[str] = None,
        recoverable: bool = True,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"server_url": server_url} if server_url else None,
        )
        self.server_url = server_url

    @classmethod
    def unreachable(cls, server_url: str, error: Exception = None) -> "RollupProviderError":
        return cls(
            f"Cannot reach rollup provider: {server_url}",
            ErrorCode.ROLLUP_PROVIDER_UNREACHABLE,
            original_error=error,
            server_url=server_url,
        )

    @classmethod
    def timeout(cls, server_url: str, timeout_seconds: float) -> "RollupProviderError":
        return cls(
            f"Rollup provider status request timed out after {timeout_seconds}s",
            ErrorCode.ROLLUP_PROVIDER_TIMEOUT,
            server_url=server_url,
        )

    @classmethod
    def invalid_response(cls, server_url: str, reason: str) -> "RollupProviderError":
        return cls(
            f"Invalid rollup provider status: {reason}",
            ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE,
            server_url=server_url,
            recoverable=False,
        )


class InitializationFailure(WebSdkError):
    """
    Any failure during WebSdk.init()

    The stage that failed is identified by the error code. The session
    has been torn down when this is raised, except for INIT_IN_PROGRESS
    (the running session is left alone) and INIT_ABORTED (destroy() already
    ran).
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INIT_FAILED,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            original_error=original_error,
        )

    @classmethod
    def from_error(cls, code: ErrorCode, error: Exception) -> "InitializationFailure":
        if isinstance(error, WebSdkError):
            reason = error.message
        else:
            reason = str(error) or error.__class__.__name__
        return cls(f"Initialization failed: {reason}", code, original_error=error)

    @classmethod
    def aborted(cls) -> "InitializationFailure":
        return cls(
            "Initialization aborted: the session was destroyed",
            ErrorCode.INIT_ABORTED,
        )

    @classmethod
    def in_progress(cls) -> "InitializationFailure":
        return cls(
            "A session is already initializing or active; call destroy() first",
            ErrorCode.INIT_IN_PROGRESS,
        )


class ConfigurationError(WebSdkError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
