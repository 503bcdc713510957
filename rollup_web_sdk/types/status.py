"""
Coordinator status types
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AppInitState(Enum):
    """Coordinator lifecycle state"""
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZING = "INITIALIZING"
    INITIALIZED = "INITIALIZED"


class AppInitAction(Enum):
    """What the coordinator is waiting on while INITIALIZING"""
    LINK_PROVIDER_ACCOUNT = "LINK_PROVIDER_ACCOUNT"
    LINK_AZTEC_ACCOUNT = "LINK_AZTEC_ACCOUNT"
    CHANGE_NETWORK = "CHANGE_NETWORK"


class AppEvent(Enum):
    """Events emitted by the coordinator itself"""
    UPDATED_INIT_STATE = "APPEVENT_UPDATED_INIT_STATE"


@dataclass(frozen=True)
class AppInitStatus:
    """
    Immutable snapshot of the coordinator status

    Attributes:
        init_state: Lifecycle state
        init_action: Pending action, only meaningful while INITIALIZING
        account: Linked account (checksummed address)
        network: Network name the rollup provider expects
        message: Progress message forwarded from the SDK
    """
    init_state: AppInitState = AppInitState.UNINITIALIZED
    init_action: Optional[AppInitAction] = None
    account: Optional[str] = None
    network: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        return self.init_state == AppInitState.INITIALIZED

    @property
    def is_initializing(self) -> bool:
        return self.init_state == AppInitState.INITIALIZING

    def __str__(self) -> str:
        parts = [self.init_state.value]
        if self.init_action is not None:
            parts.append(self.init_action.value)
        if self.account:
            parts.append(f"account={self.account}")
        if self.message:
            parts.append(f"message={self.message!r}")
        return f"AppInitStatus({', '.join(parts)})"
