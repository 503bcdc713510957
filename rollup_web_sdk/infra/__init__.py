"""
Infrastructure layer for the rollup Web SDK

Provides:
- EventChannel: Typed publish/subscribe channel
- EthProvider: Account/network view over an EIP-1193 wallet provider
- get_rollup_provider_status: Rollup provider status client (httpx)
- execute_with_retry: Async retry with correlation-aware logging
"""

from .events import EventChannel
from .eth_provider import (
    EthereumProvider,
    EthProvider,
    EthProviderEvent,
    to_account,
)
from .rollup_status import get_rollup_provider_status, status_url, StatusFetcher
from .retry import (
    execute_with_retry,
    classify_error,
    CorrelationContext,
    CorrelationIdFilter,
    get_correlation_id,
)

__all__ = [
    "EventChannel",
    # Wallet provider
    "EthereumProvider",
    "EthProvider",
    "EthProviderEvent",
    "to_account",
    # Rollup provider
    "get_rollup_provider_status",
    "status_url",
    "StatusFetcher",
    # Retry
    "execute_with_retry",
    "classify_error",
    "CorrelationContext",
    "CorrelationIdFilter",
    "get_correlation_id",
]
