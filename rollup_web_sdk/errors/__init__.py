"""
Error definitions for the rollup Web SDK
"""

from .exceptions import (
    ErrorCode,
    WebSdkError,
    ProviderError,
    AccountAccessWithdrawn,
    AccountNotLinked,
    RollupProviderError,
    InitializationFailure,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "WebSdkError",
    "ProviderError",
    "AccountAccessWithdrawn",
    "AccountNotLinked",
    "RollupProviderError",
    "InitializationFailure",
    "ConfigurationError",
]
