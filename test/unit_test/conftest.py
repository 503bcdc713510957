"""
Shared fakes and fixtures for unit tests.

Provides an in-memory EIP-1193 wallet provider and a fake SDK facade so the
coordinator can be driven without a browser or a rollup provider.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from rollup_web_sdk.infra.eth_provider import (
    EthereumProvider,
    ETH_ACCOUNTS,
    ETH_CHAIN_ID,
    ETH_REQUEST_ACCOUNTS,
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
)
from rollup_web_sdk.infra.events import EventChannel
from rollup_web_sdk.sdk import CoreSdk, LocalStatus, SdkEvent, SdkInitState, SdkOptions
from rollup_web_sdk.types import RollupProviderStatus

ACCOUNT_A = "0x" + "1" * 40
ACCOUNT_B = "0x" + "2" * 40
ACCOUNT_C = "0x" + "3" * 40


class MockEthereumProvider(EthereumProvider):
    """
    Mock EIP-1193 provider.

    Simulates MetaMask JSON-RPC responses and lets tests fire
    accountsChanged / chainChanged notifications.
    """

    def __init__(self, accounts: Optional[List[str]] = None, chain_id: int = 1):
        self._accounts = list(accounts) if accounts is not None else [ACCOUNT_A]
        self._chain_id = chain_id
        self._event_handlers: Dict[str, List[Callable]] = {}
        self.requests: List[str] = []
        self.fail_method: Optional[str] = None

    async def request(self, method: str, params: Any = None) -> Any:
        self.requests.append(method)
        if method == self.fail_method:
            raise Exception("User rejected request")
        if method in (ETH_REQUEST_ACCOUNTS, ETH_ACCOUNTS):
            return list(self._accounts)
        if method == ETH_CHAIN_ID:
            return hex(self._chain_id)
        raise Exception(f"Unsupported method: {method}")

    def on(self, event: str, callback: Callable) -> None:
        self._event_handlers.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable) -> None:
        handlers = self._event_handlers.get(event, [])
        if callback in handlers:
            handlers.remove(callback)

    def listener_count(self, event: str) -> int:
        return len(self._event_handlers.get(event, []))

    def switch_chain(self, chain_id: int, notify: bool = True) -> None:
        self._chain_id = chain_id
        if not notify:
            return
        for handler in list(self._event_handlers.get(CHAIN_CHANGED, [])):
            handler(hex(chain_id))

    def change_accounts(self, accounts: List[str], notify: bool = True) -> None:
        self._accounts = list(accounts)
        if not notify:
            return
        for handler in list(self._event_handlers.get(ACCOUNTS_CHANGED, [])):
            handler(list(accounts))


class FakeSdk(CoreSdk):
    """In-memory SDK facade"""

    def __init__(
        self,
        chain_id: int = 1,
        users: Optional[List[str]] = None,
        init_messages: Optional[List[str]] = None,
    ):
        self.chain_id = chain_id
        self.users: Dict[str, dict] = {a: {"account": a} for a in users or []}
        self.init_messages = init_messages or []
        self.added: List[str] = []
        self.init_calls = 0
        self.destroy_calls = 0
        self.init_error: Optional[Exception] = None
        self.add_user_gate: Optional[asyncio.Event] = None
        self.add_user_started = asyncio.Event()
        self.on_add_user: Optional[Callable[[str], None]] = None
        self._events = EventChannel(SdkEvent, name="fake_sdk")

    async def init(self) -> None:
        self.init_calls += 1
        for message in self.init_messages:
            self.emit(SdkEvent.UPDATED_INIT_STATE, SdkInitState.INITIALIZING, message)
        if self.init_error is not None:
            raise self.init_error
        self.emit(SdkEvent.UPDATED_INIT_STATE, SdkInitState.INITIALIZED)

    async def destroy(self) -> None:
        self.destroy_calls += 1

    def get_user(self, account: str) -> Optional[dict]:
        return self.users.get(account)

    async def add_user(self, account: str) -> dict:
        self.add_user_started.set()
        if self.on_add_user is not None:
            self.on_add_user(account)
        if self.add_user_gate is not None:
            await self.add_user_gate.wait()
        user = {"account": account}
        self.users[account] = user
        self.added.append(account)
        return user

    def get_local_status(self) -> LocalStatus:
        return LocalStatus(chain_id=self.chain_id)

    def on(self, event, listener) -> None:
        self._events.on(event, listener)

    def off(self, event, listener) -> None:
        self._events.off(event, listener)

    def emit(self, event: SdkEvent, *args: Any) -> None:
        self._events.emit(event, *args)

    def listener_count(self, event: SdkEvent) -> int:
        return self._events.listener_count(event)


class SdkFactoryRecorder:
    """SdkFactory that hands out a prepared FakeSdk and records its calls"""

    def __init__(self, sdk: FakeSdk):
        self.sdk = sdk
        self.calls: List[tuple] = []

    async def __call__(self, server_url: str, provider: EthereumProvider, options: SdkOptions) -> FakeSdk:
        self.calls.append((server_url, provider, options))
        return self.sdk


async def drain(app) -> None:
    """Let scheduled callbacks run, then wait for the coordinator's background tasks"""
    for _ in range(5):
        await asyncio.sleep(0)
    while app._tasks:
        await asyncio.gather(*list(app._tasks))


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Poll the event loop until predicate() holds"""
    async def poll():
        while not predicate():
            await asyncio.sleep(0.001)
    await asyncio.wait_for(poll(), timeout=timeout)


@pytest.fixture
def provider():
    return MockEthereumProvider(accounts=[ACCOUNT_A], chain_id=1)


@pytest.fixture
def sdk():
    return FakeSdk(chain_id=1)


@pytest.fixture
def sdk_factory(sdk):
    return SdkFactoryRecorder(sdk)


@pytest.fixture
def status_fetcher():
    return AsyncMock(return_value=RollupProviderStatus(chain_id=1, network_or_host="mainnet"))
