"""
WebSdk - Initialization and synchronization coordinator

Links a wallet provider (account + chain ID, changing at any time) with
the SDK facade, and keeps the pair consistent for the lifetime of a
session. The status stream will always be ordered like, but may not
always include, the following:

Initialization starts:
    UPDATED_INIT_STATE => INITIALIZING, LINK_PROVIDER_ACCOUNT
    UPDATED_INIT_STATE => INITIALIZING, CHANGE_NETWORK
    UPDATED_INIT_STATE => INITIALIZING, "info message 1"
    UPDATED_INIT_STATE => INITIALIZING, "info message 2"
    UPDATED_INIT_STATE => INITIALIZING, LINK_AZTEC_ACCOUNT
    UPDATED_INIT_STATE => INITIALIZED, address 1
    UPDATED_INIT_STATE => INITIALIZING, LINK_AZTEC_ACCOUNT
    UPDATED_INIT_STATE => INITIALIZED, address 2
    UPDATED_INIT_STATE => INITIALIZED, address 1
    UPDATED_INIT_STATE => UNINITIALIZED
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set, Tuple

from .config import config as global_config
from .errors import (
    AccountAccessWithdrawn,
    AccountNotLinked,
    ConfigurationError,
    ErrorCode,
    InitializationFailure,
    ProviderError,
)
from .infra.eth_provider import EthereumProvider, EthProvider, EthProviderEvent
from .infra.events import EventChannel, Listener
from .infra.retry import CorrelationContext, log_with_correlation
from .infra.rollup_status import StatusFetcher, get_rollup_provider_status
from .sdk import CoreSdk, SdkEvent, SdkFactory, SdkInitState, SdkOptions
from .types import AppEvent, AppInitAction, AppInitState, AppInitStatus, chain_id_to_network

logger = logging.getLogger(__name__)

# Every SDK event kind the coordinator re-emits, under the same kind
SDK_EVENT_RELAYS: Dict[SdkEvent, SdkEvent] = {
    SdkEvent.UPDATED_INIT_STATE: SdkEvent.UPDATED_INIT_STATE,
    SdkEvent.UPDATED_USERS: SdkEvent.UPDATED_USERS,
    SdkEvent.UPDATED_USER_STATE: SdkEvent.UPDATED_USER_STATE,
    SdkEvent.UPDATED_ACTION_STATE: SdkEvent.UPDATED_ACTION_STATE,
    SdkEvent.UPDATED_EXPLORER_ROLLUPS: SdkEvent.UPDATED_EXPLORER_ROLLUPS,
    SdkEvent.UPDATED_EXPLORER_TXS: SdkEvent.UPDATED_EXPLORER_TXS,
    SdkEvent.UPDATED_WORLD_STATE: SdkEvent.UPDATED_WORLD_STATE,
    SdkEvent.LOG: SdkEvent.LOG,
}

_KEEP = object()


@dataclass
class WebSdkConfig:
    """
    WebSdk runtime configuration

    Unset values are pulled from the global config (config.sdk).
    """
    network_poll_interval: float = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.network_poll_interval is None:
            self.network_poll_interval = global_config.sdk.network_poll_interval
        if self.network_poll_interval <= 0:
            raise ConfigurationError.invalid(
                "network_poll_interval", f"must be positive, got {self.network_poll_interval}"
            )


class WebSdk:
    """
    Coordinates a wallet provider with the SDK facade

    Usage:
        app = WebSdk(window_ethereum, sdk_factory=create_sdk)
        app.on(AppEvent.UPDATED_INIT_STATE, lambda status: print(status))
        app.on(SdkEvent.UPDATED_USER_STATE, on_user_state)

        await app.init("https://rollup.example.com")
        if app.is_initialized():
            user = app.get_user()

        await app.destroy()

    Once init() returns, account changes relink the SDK user and any
    network change or account withdrawal destroys the session.
    """

    def __init__(
        self,
        provider: EthereumProvider,
        sdk_factory: SdkFactory,
        status_fetcher: Optional[StatusFetcher] = None,
        eth_provider_factory: Optional[Callable[[EthereumProvider], EthProvider]] = None,
        config: Optional[WebSdkConfig] = None,
    ):
        """
        Initialize the coordinator (no I/O happens until init())

        Args:
            provider: EIP-1193 wallet provider
            sdk_factory: Builds the SDK facade for a rollup provider URL
            status_fetcher: Resolves the rollup provider status (defaults to HTTP fetch)
            eth_provider_factory: Builds the provider adapter (defaults to EthProvider)
            config: Runtime configuration
        """
        if sdk_factory is None:
            raise ConfigurationError.missing("sdk_factory")

        self._provider = provider
        self._sdk_factory = sdk_factory
        self._status_fetcher = status_fetcher or get_rollup_provider_status
        self._eth_provider_factory = eth_provider_factory or EthProvider
        self._config = config or WebSdkConfig()

        self._sdk: Optional[CoreSdk] = None
        self._eth_provider: Optional[EthProvider] = None
        self._sdk_listeners: List[Tuple[SdkEvent, Listener]] = []

        self._init_status = AppInitStatus()
        self._network: Optional[str] = None

        # Bumped by destroy(); suspended work from an older session must not resume
        self._session = 0
        # Bumped by every account link; an older link must not overwrite a newer one
        self._link_seq = 0
        # Session that already has a destroy() scheduled by a provider notification
        self._teardown_session: Optional[int] = None
        self._initializing = False
        self._network_wait: Optional[asyncio.Event] = None
        self._tasks: Set[asyncio.Task] = set()

        self._events = EventChannel(
            [AppEvent.UPDATED_INIT_STATE, *SDK_EVENT_RELAYS.values()],
            name="web_sdk",
            log=logger,
        )

    # ========== Observers ==========

    def on(self, event: Any, listener: Listener) -> None:
        """Subscribe to AppEvent.UPDATED_INIT_STATE or any relayed SdkEvent"""
        self._events.on(event, listener)

    def off(self, event: Any, listener: Listener) -> None:
        self._events.off(event, listener)

    # ========== Lifecycle ==========

    async def init(self, server_url: Optional[str] = None, clear_db: Optional[bool] = None) -> None:
        """
        Link the wallet provider and the SDK

        Waits without a timeout for the user to switch the wallet to the
        rollup provider's network. That wait only ends on a matching chain
        ID or on destroy().

        Args:
            server_url: Rollup provider URL (defaults to config.rollup_provider.url)
            clear_db: Ask the SDK to wipe its local database (defaults to config.sdk.clear_db)

        Raises:
            ConfigurationError: If no rollup provider URL is configured
            InitializationFailure: If any step fails; the session has been
                destroyed by the time this is raised
        """
        server_url = server_url or global_config.rollup_provider.url
        if not server_url:
            raise ConfigurationError.missing("server_url")
        if clear_db is None:
            clear_db = global_config.sdk.clear_db

        if self._initializing or self._sdk is not None or self._eth_provider is not None:
            raise InitializationFailure.in_progress()

        self._initializing = True
        session = self._session
        stage = ErrorCode.PROVIDER_INIT_FAILED

        with CorrelationContext("init"):
            log_with_correlation(logging.INFO, f"Initializing app for {server_url}", "init", log=logger)
            try:
                self._update_init_status(AppInitState.INITIALIZING, AppInitAction.LINK_PROVIDER_ACCOUNT)

                eth_provider = self._eth_provider_factory(self._provider)
                self._eth_provider = eth_provider
                await eth_provider.init()
                self._ensure_live(session)

                # The wallet must be on the rollup provider's network before the SDK is built
                stage = ErrorCode.ROLLUP_PROVIDER_UNREACHABLE
                status = await self._status_fetcher(server_url)
                self._ensure_live(session)
                self._network = chain_id_to_network(status.chain_id)
                await self._wait_for_network(eth_provider, status.chain_id, session)

                stage = ErrorCode.SDK_INIT_FAILED
                sdk = await self._sdk_factory(server_url, self._provider, SdkOptions(clear_db=clear_db))
                if not self._is_live(session):
                    await self._destroy_sdk(sdk, [])
                    raise InitializationFailure.aborted()
                self._attach_sdk(sdk)
                await sdk.init()
                self._ensure_live(session)

                stage = ErrorCode.ACCOUNT_LINK_FAILED
                await self.account_changed(eth_provider.get_account())
                self._ensure_live(session)

                eth_provider.on(EthProviderEvent.UPDATED_ACCOUNT, self._on_account_updated)
                eth_provider.on(EthProviderEvent.UPDATED_NETWORK, self._on_network_updated)

                # Catch a network switch that happened while linking
                if not self.is_correct_network():
                    log_with_correlation(
                        logging.WARNING, "Network changed during initialization", "init", log=logger
                    )
                    await self.destroy()
                    return

                log_with_correlation(logging.INFO, "Initialization complete", "init", log=logger)

            except InitializationFailure as e:
                if e.code == ErrorCode.INIT_ABORTED:
                    log_with_correlation(logging.WARNING, "Initialization aborted by destroy()", "init", log=logger)
                    raise
                if not self._is_live(session):
                    self._log_stale_failure(e)
                    raise InitializationFailure.aborted() from e
                await self.destroy()
                raise
            except Exception as e:
                # destroy() already ran for this session; the current one may belong to a newer init()
                if not self._is_live(session):
                    self._log_stale_failure(e)
                    raise InitializationFailure.aborted() from e
                log_with_correlation(logging.ERROR, f"Initialization failed: {e}", "init", log=logger)
                await self.destroy()
                raise InitializationFailure.from_error(stage, e) from e
            finally:
                if self._session == session:
                    self._initializing = False

    async def destroy(self) -> None:
        """
        Tear down the session and return to UNINITIALIZED

        Safe on a partially constructed session and safe to call any number
        of times, including concurrently. Never raises.
        """
        logger.debug("Destroying app...")
        self._session += 1
        self._link_seq += 1
        self._initializing = False
        if self._network_wait is not None:
            self._network_wait.set()

        sdk, self._sdk = self._sdk, None
        sdk_listeners, self._sdk_listeners = self._sdk_listeners, []
        eth_provider, self._eth_provider = self._eth_provider, None
        self._network = None

        if sdk is not None:
            await self._destroy_sdk(sdk, sdk_listeners)

        if eth_provider is not None:
            try:
                eth_provider.destroy()
            except Exception:
                logger.exception("Failed to destroy wallet provider adapter")

        self._update_init_status(AppInitState.UNINITIALIZED, account=None)

    # ========== Provider notifications ==========

    async def account_changed(self, account: Optional[str]) -> None:
        """
        Link an account to the SDK

        Registers the account with the SDK first if it is unknown. An
        already registered account goes straight to INITIALIZED.

        Without an SDK (before init() built one, or after destroy()) this is
        a no-op: nothing is linked and no status is emitted.

        Raises:
            AccountAccessWithdrawn: If account is None
        """
        if account is None:
            raise AccountAccessWithdrawn()

        sdk = self._sdk
        if sdk is None:
            logger.debug(f"Not linking {account}: no SDK in this session")
            return

        self._link_seq += 1
        link = (self._session, self._link_seq)

        if sdk.get_user(account) is None:
            logger.info(f"Registering account {account}")
            self._update_init_status(
                AppInitState.INITIALIZING, AppInitAction.LINK_AZTEC_ACCOUNT, account=account
            )
            await sdk.add_user(account)
            if link != (self._session, self._link_seq):
                logger.debug(f"Dropping stale link of {account}")
                return

        self._update_init_status(AppInitState.INITIALIZED, account=account)

    def network_changed(self) -> None:
        """Destroy the session if the wallet left the SDK's network"""
        if self._sdk is None or self._eth_provider is None:
            return
        if not self.is_correct_network():
            self._request_teardown(
                f"Wallet switched to chain {self._eth_provider.get_chain_id()}, "
                f"SDK is bound to chain {self._sdk.get_local_status().chain_id}"
            )

    def _on_account_updated(self, account: Optional[str]) -> None:
        self._spawn(self._relink(account, self._session))

    def _on_network_updated(self, chain_id: Optional[int] = None) -> None:
        self.network_changed()

    async def _relink(self, account: Optional[str], session: int) -> None:
        try:
            await self.account_changed(account)
        except Exception as e:
            if self._is_live(session):
                self._request_teardown(f"Account change failed: {e}")

    def _request_teardown(self, reason: str) -> None:
        """Schedule at most one destroy() per session"""
        session = self._session
        if self._teardown_session == session:
            logger.debug(f"Teardown already pending, ignoring: {reason}")
            return
        self._teardown_session = session
        logger.warning(f"{reason}; destroying")
        self._spawn(self._teardown(session))

    async def _teardown(self, session: int) -> None:
        if self._is_live(session):
            await self.destroy()

    # ========== Queries ==========

    def get_sdk(self) -> Optional[CoreSdk]:
        return self._sdk

    def get_eth_provider(self) -> Optional[EthProvider]:
        return self._eth_provider

    def is_initialized(self) -> bool:
        return self._init_status.init_state == AppInitState.INITIALIZED

    def is_correct_network(self) -> bool:
        """Whether the wallet is on the chain the SDK is bound to"""
        if self._sdk is None or self._eth_provider is None:
            return False
        return self._eth_provider.get_chain_id() == self._sdk.get_local_status().chain_id

    def get_init_status(self) -> AppInitStatus:
        return self._init_status

    def get_user(self) -> Any:
        """
        Registered SDK user of the linked account

        Raises:
            AccountNotLinked: If no account is linked
        """
        account = self._init_status.account
        if account is None or self._sdk is None:
            raise AccountNotLinked()
        user = self._sdk.get_user(account)
        if user is None:
            raise AccountNotLinked(f"Account {account} is not registered with the SDK.")
        return user

    # ========== Internals ==========

    def _update_init_status(
        self,
        init_state: AppInitState,
        init_action: Optional[AppInitAction] = None,
        message: Optional[str] = None,
        account: Any = _KEEP,
    ) -> None:
        """Sole writer of the status: replace the snapshot, then emit it"""
        status = AppInitStatus(
            init_state=init_state,
            init_action=init_action,
            account=self._init_status.account if account is _KEEP else account,
            network=self._network,
            message=message,
        )
        self._init_status = status
        logger.debug(f"Status: {status}")
        self._events.emit(AppEvent.UPDATED_INIT_STATE, status)

    def _is_live(self, session: int) -> bool:
        return self._session == session

    def _ensure_live(self, session: int) -> None:
        if self._session != session:
            raise InitializationFailure.aborted()

    def _log_stale_failure(self, error: Exception) -> None:
        log_with_correlation(
            logging.WARNING,
            f"Initialization failed after destroy(), treating as aborted: {error}",
            "init",
            log=logger,
        )

    async def _wait_for_network(self, eth_provider: EthProvider, chain_id: int, session: int) -> None:
        if eth_provider.get_chain_id() == chain_id:
            return

        self._update_init_status(AppInitState.INITIALIZING, AppInitAction.CHANGE_NETWORK)
        log_with_correlation(
            logging.INFO,
            f"Waiting for wallet to switch from chain {eth_provider.get_chain_id()} to {chain_id} ({self._network})",
            "init",
            log=logger,
        )

        changed = asyncio.Event()

        def wake(*_: Any) -> None:
            changed.set()

        self._network_wait = changed
        eth_provider.on(EthProviderEvent.UPDATED_NETWORK, wake)
        try:
            while True:
                self._ensure_live(session)
                if eth_provider.get_chain_id() == chain_id:
                    return
                try:
                    await asyncio.wait_for(changed.wait(), timeout=self._config.network_poll_interval)
                except asyncio.TimeoutError:
                    try:
                        await eth_provider.refresh()
                    except ProviderError as e:
                        logger.warning(f"Wallet refresh failed while waiting for network: {e}")
                changed.clear()
        finally:
            eth_provider.off(EthProviderEvent.UPDATED_NETWORK, wake)
            if self._network_wait is changed:
                self._network_wait = None

    def _attach_sdk(self, sdk: CoreSdk) -> None:
        self._sdk = sdk

        # Relays go first so listeners see every event, including those from init()
        for event, relayed in SDK_EVENT_RELAYS.items():
            listener = self._relay(relayed)
            sdk.on(event, listener)
            self._sdk_listeners.append((event, listener))

        sdk.on(SdkEvent.UPDATED_INIT_STATE, self._sdk_init_state_changed)
        self._sdk_listeners.append((SdkEvent.UPDATED_INIT_STATE, self._sdk_init_state_changed))

    def _relay(self, event: SdkEvent) -> Listener:
        def relay(*args: Any) -> None:
            self._events.emit(event, *args)
        return relay

    def _sdk_init_state_changed(self, init_state: SdkInitState, message: Optional[str] = None) -> None:
        if init_state != SdkInitState.INITIALIZING:
            return
        if self._init_status.init_state != AppInitState.INITIALIZING:
            return
        self._update_init_status(AppInitState.INITIALIZING, None, message)

    async def _destroy_sdk(self, sdk: CoreSdk, listeners: List[Tuple[SdkEvent, Listener]]) -> None:
        for event, listener in listeners:
            try:
                sdk.off(event, listener)
            except Exception:
                logger.exception(f"Failed to detach SDK listener for {event.name}")
        try:
            await sdk.destroy()
        except Exception:
            logger.exception("Failed to destroy SDK")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
