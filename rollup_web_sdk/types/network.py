"""
Chain ID helpers

Maps EVM chain IDs to the network names shown to users and normalizes
the chain ID formats returned by wallet providers.
"""

from typing import Dict, Union

from ..errors import ConfigurationError

# Chain names
CHAIN_NAMES: Dict[int, str] = {
    1: "mainnet",
    3: "ropsten",
    4: "rinkeby",
    5: "goerli",
    42: "kovan",
    1337: "ganache",
}


def chain_id_to_network(chain_id: int) -> str:
    """Get network name for a chain ID"""
    return CHAIN_NAMES.get(chain_id, f"unknown (chain {chain_id})")


def parse_chain_id(value: Union[int, str]) -> int:
    """
    Parse a chain ID as returned by a provider or status endpoint

    EIP-1193 providers return hex strings ("0x1"), some legacy providers
    return decimal strings ("1") and JSON documents carry integers.

    Raises:
        ConfigurationError: If the value is not a valid chain ID
    """
    if isinstance(value, bool):
        raise ConfigurationError.invalid("chain_id", f"not a chain id: {value!r}")
    if isinstance(value, int):
        chain_id = value
    elif isinstance(value, str):
        text = value.strip().lower()
        try:
            chain_id = int(text, 16) if text.startswith("0x") else int(text)
        except ValueError:
            raise ConfigurationError.invalid("chain_id", f"not a chain id: {value!r}")
    else:
        raise ConfigurationError.invalid("chain_id", f"not a chain id: {value!r}")

    if chain_id <= 0:
        raise ConfigurationError.invalid("chain_id", f"must be positive, got {chain_id}")
    return chain_id
