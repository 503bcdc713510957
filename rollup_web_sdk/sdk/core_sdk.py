"""
Base SDK facade interface

The coordinator drives an underlying transactional SDK through this
interface only. Proof generation, rollup scheduling and world state
storage live behind it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from ..infra.events import Listener
from ..infra.eth_provider import EthereumProvider


class SdkEvent(Enum):
    """Events emitted by the SDK facade"""
    UPDATED_INIT_STATE = "SDKEVENT_UPDATED_INIT_STATE"
    UPDATED_USERS = "SDKEVENT_UPDATED_USERS"
    UPDATED_USER_STATE = "SDKEVENT_UPDATED_USER_STATE"
    UPDATED_ACTION_STATE = "SDKEVENT_UPDATED_ACTION_STATE"
    UPDATED_EXPLORER_ROLLUPS = "SDKEVENT_UPDATED_EXPLORER_ROLLUPS"
    UPDATED_EXPLORER_TXS = "SDKEVENT_UPDATED_EXPLORER_TXS"
    UPDATED_WORLD_STATE = "SDKEVENT_UPDATED_WORLD_STATE"
    LOG = "SDKEVENT_LOG"


class SdkInitState(Enum):
    """SDK facade's own initialization sub-state"""
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZING = "INITIALIZING"
    INITIALIZED = "INITIALIZED"
    DESTROYED = "DESTROYED"


@dataclass(frozen=True)
class SdkOptions:
    """Options passed to the SDK factory"""
    clear_db: bool = False


@dataclass(frozen=True)
class LocalStatus:
    """Locally cached SDK status"""
    chain_id: int
    data_size: Optional[int] = None
    data_root: Optional[str] = None


class CoreSdk(ABC):
    """
    Abstract base class for the SDK facade

    Each implementation provides:
    - Lifecycle (init, destroy)
    - Per-account lookup and registration
    - A cached local status (chain ID)
    - An event stream of SdkEvent kinds
    """

    # ========== Lifecycle ==========

    @abstractmethod
    async def init(self) -> None:
        """
        Initialize the SDK

        May emit SdkEvent.UPDATED_INIT_STATE(SdkInitState.INITIALIZING, message)
        progress events while running.
        """
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Release all resources"""
        ...

    # ========== Users ==========

    @abstractmethod
    def get_user(self, account: str) -> Optional[Any]:
        """
        Get the registered user for an account

        Returns:
            User object, or None if the account is not registered
        """
        ...

    @abstractmethod
    async def add_user(self, account: str) -> Any:
        """
        Register an account and wait until it is usable

        Returns:
            The new user object
        """
        ...

    # ========== Status ==========

    @abstractmethod
    def get_local_status(self) -> LocalStatus:
        """Locally cached status, including the chain ID the SDK is bound to"""
        ...

    # ========== Events ==========

    @abstractmethod
    def on(self, event: SdkEvent, listener: Listener) -> None:
        ...

    @abstractmethod
    def off(self, event: SdkEvent, listener: Listener) -> None:
        ...


# Builds a CoreSdk bound to a rollup provider URL and a wallet provider
SdkFactory = Callable[[str, EthereumProvider, SdkOptions], Awaitable[CoreSdk]]
