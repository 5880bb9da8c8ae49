"""Client-handle factories.

A factory is called as ``factory(endpoint, credential, config)`` and returns a
context manager (async context manager for the async factories) that yields a
client bound to one credential and the endpoint's base URL. Every handle has a
bounded per-call timeout and no transport-level retries: retrying is owned by
the executor alone.

Operations are expected to raise on HTTP errors (``raise_for_status()``) so the
executor can classify the failure.
"""

from urllib.parse import urljoin

from .types import ClientConfig, EndpointConfig


def _base(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def join_url(base_url: str, path: str) -> str:
    """Join `path` onto `base_url`, keeping the base path (``v1/`` + ``models``)."""
    if path.startswith(("http://", "https://")):
        return path
    return urljoin(_base(base_url), path.lstrip("/"))


# ---------- httpx (sync) ----------
class HttpxClientFactory:
    def __init__(self, transport=None, **client_kwargs):
        # transport: optional httpx.BaseTransport (e.g. httpx.MockTransport)
        self.transport = transport
        self.client_kwargs = client_kwargs

    def __call__(self, endpoint: EndpointConfig, credential: str, config: ClientConfig):
        import httpx  # noqa: PLC0415

        transport = self.transport or httpx.HTTPTransport(retries=0)
        return httpx.Client(
            base_url=endpoint.base_url,
            headers=config.auth_headers(credential),
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
            **self.client_kwargs,
        )


# ---------- httpx (async) ----------
class AsyncHttpxClientFactory:
    def __init__(self, transport=None, **client_kwargs):
        self.transport = transport
        self.client_kwargs = client_kwargs

    def __call__(self, endpoint: EndpointConfig, credential: str, config: ClientConfig):
        import httpx  # noqa: PLC0415

        transport = self.transport or httpx.AsyncHTTPTransport(retries=0)
        return httpx.AsyncClient(
            base_url=endpoint.base_url,
            headers=config.auth_headers(credential),
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
            **self.client_kwargs,
        )


# ---------- requests (sync) ----------
def _make_requests_session(base_url: str, timeout: float):
    import requests  # noqa: PLC0415
    from requests.adapters import HTTPAdapter  # noqa: PLC0415

    class _EndpointSession(requests.Session):
        """Session that resolves relative URLs against the endpoint and applies a timeout."""

        def __init__(self):
            super().__init__()
            self.base_url = base_url
            self.timeout = timeout
            adapter = HTTPAdapter(max_retries=0)
            self.mount("http://", adapter)
            self.mount("https://", adapter)

        def request(self, method, url, *args, **kwargs):
            kwargs.setdefault("timeout", self.timeout)
            return super().request(method, join_url(self.base_url, url), *args, **kwargs)

    return _EndpointSession()


class RequestsClientFactory:
    def __call__(self, endpoint: EndpointConfig, credential: str, config: ClientConfig):
        session = _make_requests_session(endpoint.base_url, config.timeout)
        session.headers.update(config.auth_headers(credential))
        return session


# ---------- aiohttp (async) ----------
class AiohttpClient:
    """Thin handle over an aiohttp session bound to one endpoint.

    ``request`` returns aiohttp's own request context manager, so both
    ``async with client.get("models") as resp`` and ``await client.get(...)`` work.
    """

    def __init__(self, session, base_url: str):
        self.session = session
        self.base_url = base_url

    def url(self, path: str) -> str:
        return join_url(self.base_url, path)

    def request(self, method: str, path: str, **kwargs):
        kwargs.setdefault("raise_for_status", True)
        return self.session.request(method, self.url(path), **kwargs)

    def get(self, path: str, **kw):
        return self.request("GET", path, **kw)

    def post(self, path: str, **kw):
        return self.request("POST", path, **kw)


class _AiohttpClientContext:
    def __init__(
        self, endpoint: EndpointConfig, credential: str, config: ClientConfig, session_kwargs
    ):
        self.endpoint = endpoint
        self.credential = credential
        self.config = config
        self.session_kwargs = session_kwargs
        self._session = None

    async def __aenter__(self) -> AiohttpClient:
        import aiohttp  # noqa: PLC0415

        self._session = aiohttp.ClientSession(
            headers=self.config.auth_headers(self.credential),
            timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            **self.session_kwargs,
        )
        return AiohttpClient(self._session, self.endpoint.base_url)

    async def __aexit__(self, exc_type, exc, tb):
        if self._session is not None:
            await self._session.close()
        return False


class AiohttpClientFactory:
    def __init__(self, **session_kwargs):
        self.session_kwargs = session_kwargs

    def __call__(self, endpoint: EndpointConfig, credential: str, config: ClientConfig):
        return _AiohttpClientContext(endpoint, credential, config, self.session_kwargs)
