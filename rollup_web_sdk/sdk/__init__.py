"""
SDK facade contract
"""

from .core_sdk import (
    CoreSdk,
    SdkEvent,
    SdkInitState,
    SdkOptions,
    LocalStatus,
    SdkFactory,
)

__all__ = [
    "CoreSdk",
    "SdkEvent",
    "SdkInitState",
    "SdkOptions",
    "LocalStatus",
    "SdkFactory",
]
