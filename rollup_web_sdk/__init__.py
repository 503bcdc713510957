"""
rollup_web_sdk - Wallet provider / rollup SDK coordinator

Links an EIP-1193 wallet provider (MetaMask and friends) with a rollup SDK
facade and keeps the linked account and network consistent.

Usage:
    from rollup_web_sdk import WebSdk, AppEvent

    app = WebSdk(provider, sdk_factory=create_sdk)
    app.on(AppEvent.UPDATED_INIT_STATE, print)
    await app.init("https://rollup.example.com")
"""

from .web_sdk import WebSdk, WebSdkConfig, SDK_EVENT_RELAYS
from .types import (
    AppInitState,
    AppInitAction,
    AppEvent,
    AppInitStatus,
    RollupProviderStatus,
    chain_id_to_network,
)
from .sdk import CoreSdk, SdkEvent, SdkInitState, SdkOptions, LocalStatus, SdkFactory
from .infra import (
    EthereumProvider,
    EthProvider,
    EthProviderEvent,
    get_rollup_provider_status,
)
from .errors import (
    ErrorCode,
    WebSdkError,
    ProviderError,
    AccountAccessWithdrawn,
    AccountNotLinked,
    RollupProviderError,
    InitializationFailure,
    ConfigurationError,
)
from .config import config, get_config, LoggingConfig, setup_logging

__version__ = "0.1.0"

__all__ = [
    # Coordinator
    "WebSdk",
    "WebSdkConfig",
    "SDK_EVENT_RELAYS",
    # Status
    "AppInitState",
    "AppInitAction",
    "AppEvent",
    "AppInitStatus",
    "RollupProviderStatus",
    "chain_id_to_network",
    # SDK facade
    "CoreSdk",
    "SdkEvent",
    "SdkInitState",
    "SdkOptions",
    "LocalStatus",
    "SdkFactory",
    # Wallet provider
    "EthereumProvider",
    "EthProvider",
    "EthProviderEvent",
    "get_rollup_provider_status",
    # Errors
    "ErrorCode",
    "WebSdkError",
    "ProviderError",
    "AccountAccessWithdrawn",
    "AccountNotLinked",
    "RollupProviderError",
    "InitializationFailure",
    "ConfigurationError",
    # Config
    "config",
    "get_config",
    "LoggingConfig",
    "setup_logging",
]
