"""Shared HTTP session for the Airtable client.

Holds the authentication headers and timeout, and hands out one
``httpx.Client`` per thread.
"""

import threading

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpSession:
    """Per-thread ``httpx.Client`` pool sharing one set of credentials.

    Each thread lazily gets its own client. :meth:`close` closes the clients
    of every thread; a thread that makes another request afterwards gets a
    fresh one.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the session.

        Args:
            api_key: Airtable personal access token or API key.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional transport override, mainly for tests.
        """
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._transport = transport
        self._local = threading.local()
        self._lock = threading.Lock()
        self._open_clients: list[httpx.Client] = []

    @property
    def client(self) -> httpx.Client:
        """The calling thread's ``httpx.Client``, opened on first use."""
        client: httpx.Client | None = getattr(self._local, "client", None)
        if client is not None and not client.is_closed:
            return client

        client = httpx.Client(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        self._local.client = client
        with self._lock:
            self._open_clients = [c for c in self._open_clients if not c.is_closed]
            self._open_clients.append(client)
            open_count = len(self._open_clients)
        logger.debug(
            "Opened HTTP client",
            thread=threading.get_ident(),
            open_clients=open_count,
        )
        return client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the HTTP clients opened by all threads."""
        with self._lock:
            clients, self._open_clients = self._open_clients, []
        for client in clients:
            if not client.is_closed:
                client.close()
        if clients:
            logger.debug("Closed HTTP clients", count=len(clients))
