"""
Type definitions for the rollup Web SDK
"""

from .status import AppInitState, AppInitAction, AppEvent, AppInitStatus
from .network import CHAIN_NAMES, chain_id_to_network, parse_chain_id
from .server_status import RollupProviderStatus

__all__ = [
    # Coordinator status
    "AppInitState",
    "AppInitAction",
    "AppEvent",
    "AppInitStatus",
    # Networks
    "CHAIN_NAMES",
    "chain_id_to_network",
    "parse_chain_id",
    # Rollup provider
    "RollupProviderStatus",
]
