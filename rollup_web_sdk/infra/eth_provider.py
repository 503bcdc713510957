"""
Wallet provider adapter

Wraps an EIP-1193 style provider (MetaMask and friends) and exposes the
currently selected account and chain ID together with change notifications.
Addresses are normalized to checksum form with web3.py.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, List, Optional

from web3 import Web3

from ..errors import ProviderError, ConfigurationError
from ..types.network import parse_chain_id
from .events import EventChannel, Listener

logger = logging.getLogger(__name__)

# Standard Ethereum provider methods
ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"
ETH_ACCOUNTS = "eth_accounts"
ETH_CHAIN_ID = "eth_chainId"

# EIP-1193 provider events
ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"


class EthereumProvider(ABC):
    """
    Abstract EIP-1193 provider interface.

    Represents window.ethereum in a browser bridge or a mock for testing.
    """

    @abstractmethod
    async def request(self, method: str, params: Any = None) -> Any:
        """Send JSON-RPC request."""
        ...

    @abstractmethod
    def on(self, event: str, callback: Callable) -> None:
        """Subscribe to events."""
        ...

    @abstractmethod
    def remove_listener(self, event: str, callback: Callable) -> None:
        """Unsubscribe from events."""
        ...


class EthProviderEvent(Enum):
    """Events emitted by EthProvider"""
    UPDATED_ACCOUNT = "ETHPROVIDER_UPDATED_ACCOUNT"
    UPDATED_NETWORK = "ETHPROVIDER_UPDATED_NETWORK"


def to_account(address: str) -> str:
    """
    Normalize an address to checksum form

    Raises:
        ConfigurationError: If the value is not an address
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ConfigurationError.invalid("account", f"not an address: {address!r}")
    return Web3.to_checksum_address(address)


class EthProvider:
    """
    Account/network view over an EIP-1193 provider

    Usage:
        eth_provider = EthProvider(provider)
        await eth_provider.init()

        eth_provider.get_chain_id()   # 1
        eth_provider.get_account()    # "0xAbC..." or None

        eth_provider.on(EthProviderEvent.UPDATED_ACCOUNT, on_account)
        eth_provider.on(EthProviderEvent.UPDATED_NETWORK, on_network)

        eth_provider.destroy()
    """

    def __init__(self, provider: EthereumProvider):
        self._provider = provider
        self._accounts: List[str] = []
        self._chain_id: Optional[int] = None
        self._subscribed = False
        self._events = EventChannel(EthProviderEvent, name="eth_provider", log=logger)

    @property
    def provider(self) -> EthereumProvider:
        """Wrapped EIP-1193 provider"""
        return self._provider

    async def init(self) -> None:
        """
        Request account access and read the current chain ID

        Subscribes to provider notifications before the first request so
        that changes made while the user is answering the prompt are seen.

        Raises:
            ProviderError: If the provider rejects a request or answers garbage
        """
        if not self._subscribed:
            self._provider.on(ACCOUNTS_CHANGED, self._accounts_changed)
            self._provider.on(CHAIN_CHANGED, self._chain_changed)
            self._subscribed = True

        accounts = await self._request(ETH_REQUEST_ACCOUNTS)
        self._accounts = self._parse_accounts(ETH_REQUEST_ACCOUNTS, accounts)
        self._chain_id = await self._read_chain_id()

        logger.debug(f"EthProvider ready: chain={self._chain_id} account={self.get_account()}")

    async def refresh(self) -> None:
        """
        Re-read the account and chain ID without prompting the user

        Emits UPDATED_ACCOUNT / UPDATED_NETWORK for whatever changed, for
        wallets that switch without notifying.

        Raises:
            ProviderError: If the provider rejects a request or answers garbage
        """
        accounts = self._parse_accounts(ETH_ACCOUNTS, await self._request(ETH_ACCOUNTS))
        chain_id = await self._read_chain_id()

        account_changed = accounts[:1] != self._accounts[:1]
        chain_changed = chain_id != self._chain_id
        self._accounts = accounts
        self._chain_id = chain_id

        if account_changed:
            self._events.emit(EthProviderEvent.UPDATED_ACCOUNT, self.get_account())
        if chain_changed:
            self._events.emit(EthProviderEvent.UPDATED_NETWORK, chain_id)

    def get_chain_id(self) -> Optional[int]:
        """Currently selected chain ID (None before init)"""
        return self._chain_id

    def get_account(self) -> Optional[str]:
        """Currently selected account (None if access was not granted)"""
        return self._accounts[0] if self._accounts else None

    def on(self, event: EthProviderEvent, listener: Listener) -> None:
        self._events.on(event, listener)

    def off(self, event: EthProviderEvent, listener: Listener) -> None:
        self._events.off(event, listener)

    def destroy(self) -> None:
        """Detach from the provider and drop all listeners (idempotent)"""
        if self._subscribed:
            self._provider.remove_listener(ACCOUNTS_CHANGED, self._accounts_changed)
            self._provider.remove_listener(CHAIN_CHANGED, self._chain_changed)
            self._subscribed = False
        self._events.clear()

    async def _request(self, method: str, params: Any = None) -> Any:
        try:
            return await self._provider.request(method, params)
        except Exception as e:
            raise ProviderError.request_failed(method, e) from e

    async def _read_chain_id(self) -> int:
        value = await self._request(ETH_CHAIN_ID)
        try:
            return parse_chain_id(value)
        except ConfigurationError:
            raise ProviderError.invalid_response(ETH_CHAIN_ID, value)

    @staticmethod
    def _parse_accounts(method: str, accounts: Any) -> List[str]:
        if accounts is None:
            return []
        if not isinstance(accounts, (list, tuple)):
            raise ProviderError.invalid_response(method, accounts)
        try:
            return [to_account(a) for a in accounts]
        except ConfigurationError:
            raise ProviderError.invalid_response(method, accounts)

    def _accounts_changed(self, accounts: Any) -> None:
        try:
            self._accounts = self._parse_accounts(ACCOUNTS_CHANGED, accounts)
        except ProviderError as e:
            # Treat an unreadable account list as withdrawn access
            logger.warning(f"Ignoring malformed account list, treating as no account: {e}")
            self._accounts = []
        self._events.emit(EthProviderEvent.UPDATED_ACCOUNT, self.get_account())

    def _chain_changed(self, chain_id: Any) -> None:
        try:
            self._chain_id = parse_chain_id(chain_id)
        except ConfigurationError:
            logger.warning(f"Ignoring malformed chain id from provider: {chain_id!r}")
            return
        self._events.emit(EthProviderEvent.UPDATED_NETWORK, self._chain_id)
