from httpx import AsyncClient, Client, Timeout
from contextlib import asynccontextmanager

from .schemas import NetworkConfig

NETWORK = NetworkConfig()

# Per-request bound applied to every outbound call. Requests are never retried.


NETWORK_TIMEOUT = NETWORK.timeout
DEFAULT_HEADERS = {"User-Agent": NETWORK.user_agent}

# Global synchronous client, used for webhook notifications.


sync_client = Client(
    timeout=Timeout(NETWORK_TIMEOUT),
    headers=DEFAULT_HEADERS,
)


@asynccontextmanager
async def get_async_http_client():
    """
    Provides a new AsyncClient instance for one batch of source fetches,
    closing it when the batch is done.
    """
    client = None
    try:
        client = AsyncClient(
            timeout=Timeout(NETWORK_TIMEOUT),
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
        )
        yield client

    finally:
        if client:
            await client.aclose()
