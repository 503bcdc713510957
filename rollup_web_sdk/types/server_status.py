"""
Rollup provider status document
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .network import chain_id_to_network, parse_chain_id


@dataclass(frozen=True)
class RollupProviderStatus:
    """
    Static status published by the rollup provider

    Attributes:
        chain_id: Chain ID the rollup contract lives on
        network_or_host: Network name or RPC host the provider is connected to
        rollup_contract_address: Rollup contract address, if published
    """
    chain_id: int
    network_or_host: str = ""
    rollup_contract_address: Optional[str] = None

    @property
    def network(self) -> str:
        """Human readable network name"""
        return chain_id_to_network(self.chain_id)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RollupProviderStatus":
        """
        Build from the provider's JSON status document

        Raises:
            KeyError: If chainId is missing
            ConfigurationError: If chainId is not a valid chain ID
        """
        return cls(
            chain_id=parse_chain_id(data["chainId"]),
            network_or_host=data.get("networkOrHost") or "",
            rollup_contract_address=data.get("rollupContractAddress"),
        )
