"""
Rollup provider status client

Fetches the static status document a rollup provider publishes, most
importantly the chain ID its rollup contract lives on.
"""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from ..config import config as global_config
from ..errors import ConfigurationError, RollupProviderError
from ..types import RollupProviderStatus
from .retry import execute_with_retry

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable[RollupProviderStatus]]


def status_url(server_url: str, status_path: Optional[str] = None) -> str:
    """Build the status endpoint URL for a rollup provider"""
    if not server_url:
        raise ConfigurationError.missing("server_url")
    path = status_path if status_path is not None else global_config.rollup_provider.status_path
    return f"{server_url.rstrip('/')}/{path.lstrip('/')}"


async def _fetch_status(client: httpx.AsyncClient, url: str, server_url: str) -> RollupProviderStatus:
    try:
        response = await client.get(url)
    except httpx.TimeoutException as e:
        raise RollupProviderError.timeout(server_url, client.timeout.read or 0.0) from e
    except httpx.TransportError as e:
        raise RollupProviderError.unreachable(server_url, e) from e

    if response.status_code >= 500:
        raise RollupProviderError.unreachable(
            server_url, httpx.HTTPStatusError(
                f"HTTP {response.status_code}", request=response.request, response=response
            )
        )
    if response.status_code != 200:
        raise RollupProviderError.invalid_response(server_url, f"HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError:
        raise RollupProviderError.invalid_response(server_url, "response is not JSON")
    if not isinstance(data, dict):
        raise RollupProviderError.invalid_response(server_url, "response is not an object")

    try:
        return RollupProviderStatus.from_json(data)
    except KeyError:
        raise RollupProviderError.invalid_response(server_url, "missing chainId")
    except ConfigurationError as e:
        raise RollupProviderError.invalid_response(server_url, e.message)


async def get_rollup_provider_status(
    server_url: str,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
    sleep_func: Optional[Callable[[float], Awaitable[None]]] = None,
) -> RollupProviderStatus:
    """
    Fetch the rollup provider status

    Args:
        server_url: Rollup provider base URL
        timeout: Request timeout (defaults to config.rollup_provider.timeout_seconds)
        max_retries: Attempts for transient failures
        retry_delay: Base delay between attempts
        client: Optional shared httpx.AsyncClient (not closed by this call)
        sleep_func: Awaitable sleep used between attempts

    Returns:
        RollupProviderStatus

    Raises:
        RollupProviderError: If the provider is unreachable or answers garbage
    """
    url = status_url(server_url)
    timeout = timeout if timeout is not None else global_config.rollup_provider.timeout_seconds

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=timeout, headers={"Accept": "application/json"})
    try:
        status = await execute_with_retry(
            lambda: _fetch_status(http, url, server_url),
            "rollup_status",
            max_retries=max_retries,
            retry_delay=retry_delay,
            sleep_func=sleep_func,
        )
    finally:
        if owns_client:
            await http.aclose()

    logger.debug(
        f"Rollup provider status: chain={status.chain_id} network={status.network} "
        f"host={status.network_or_host}"
    )
    return status
