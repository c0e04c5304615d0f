"""Entry point of the Airtable client.

Holds the API key and base URL and hands out :class:`AirtableBase` handles
that share one HTTP session.
"""

import httpx
import structlog

from .base import AirtableBase
from .config import DEFAULT_BASE_URL, ClientConfig, configure_logging
from .session import DEFAULT_TIMEOUT, HttpSession

logger = structlog.get_logger(__name__)


class AirtableClient:
    """Client for the Airtable REST API.

    Can be used as a context manager to close pooled connections on exit.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Personal access token sent as a bearer credential.
            base_url: API root; defaults to https://api.airtable.com/v0.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport override, mainly for tests.
        """
        self._api_key = api_key
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._session = HttpSession(api_key, timeout=timeout, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> "AirtableClient":
        """Build a client from validated configuration.

        Also applies the configured log level to structlog.
        """
        configure_logging(config.log_level)
        client = cls(
            api_key=config.resolve_api_key(),
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )
        logger.info("Created Airtable client", base_url=client.base_url)
        return client

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"AirtableClient(base_url={self._base_url!r})"

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close pooled HTTP connections opened by any thread."""
        self._session.close()

    def base(self, base_id: str) -> AirtableBase:
        """Get a handle for a base by id."""
        return AirtableBase(
            base_id=base_id,
            api_key=self._api_key,
            base_url=self._base_url,
            session=self._session,
        )
