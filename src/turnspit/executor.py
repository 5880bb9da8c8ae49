import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, Union

from .adapters import AsyncHttpxClientFactory, HttpxClientFactory
from .env import ENDPOINTS_VAR
from .errors import (
    AllCredentialsBlockedError,
    ConfigurationError,
    TurnspitError,
    UpstreamAuthOrQuotaError,
    UpstreamError,
    classify_error,
    mask_credential,
)
from .quarantine import QuarantineStore, get_quarantine_store
from .registry import EndpointRegistry
from .types import DEFAULT_SCOPE, DEFAULT_TIMEOUT, ClientConfig, EndpointConfig

T = TypeVar("T")

EndpointRef = Union[EndpointConfig, str, None]


# ---------- Base executor (shared logic; the attempt loop lives in subclasses) ----------


class _Failover:
    def __init__(
        self,
        client_factory,
        store: Union[QuarantineStore, None],
        registry: Union[EndpointRegistry, None],
        log_level: Union[int, None],
        **kwargs,
    ):
        """Initialize a _Failover.

        Args:
            client_factory: callable(endpoint, credential, config) returning a client context
            store (QuarantineStore | None): quarantine table; the process-wide one if None
            registry (EndpointRegistry | None): used to resolve endpoint ids passed to run()
            log_level (int | None): level for the "turnspit" logger
            kwargs:
            - client_config: ClientConfig object
            - timeout: float
            - auth_header: str
            - auth_scheme: str
        """
        self.client_factory = client_factory
        self.store = store if store is not None else get_quarantine_store()
        self.registry = registry
        # Resolve client settings (prefer ClientConfig if provided)
        if kwargs.get("client_config") is not None:
            self.client_config: ClientConfig = kwargs["client_config"]
        else:
            self.client_config = ClientConfig(
                timeout=kwargs.get("timeout", DEFAULT_TIMEOUT),
                auth_header=kwargs.get("auth_header", "Authorization"),
                auth_scheme=kwargs.get("auth_scheme", "Bearer"),
            )
        self._logger = logging.getLogger("turnspit")
        if log_level is not None:
            with contextlib.suppress(Exception):
                self._logger.setLevel(log_level)

    def _now(self) -> float:
        return time.time()

    def _resolve(self, endpoint: EndpointRef) -> EndpointConfig:
        if not isinstance(endpoint, EndpointConfig):
            if self.registry is not None:
                endpoint = self.registry.resolve(endpoint)
            elif endpoint is not None:
                raise ConfigurationError(
                    f"cannot resolve endpoint '{endpoint}' without an EndpointRegistry"
                )
        if endpoint is None:
            raise ConfigurationError("no endpoint configured")
        if not endpoint.credentials:
            raise ConfigurationError(f"no credential configured for endpoint '{endpoint.id}'")
        return endpoint

    def _available(self, endpoint: EndpointConfig, scope: str) -> list[str]:
        # purges expired entries store-wide before filtering
        available = self.store.available(endpoint.credentials, scope, self._now())
        if not available:
            self._logger.info(
                f"endpoint={endpoint.id} scope={scope} all credentials blocked; not calling upstream"
            )
            raise AllCredentialsBlockedError(scope, endpoint.id)
        return available

    def _on_failure(
        self, exc: Exception, endpoint: EndpointConfig, credential: str, scope: str
    ) -> UpstreamError:
        err = classify_error(exc, scope, credential)
        err.__cause__ = exc
        hint = mask_credential(credential)
        if isinstance(err, UpstreamAuthOrQuotaError):
            self.store.block(credential, scope, self._now())
            self._logger.warning(
                f"endpoint={endpoint.id} key={hint} scope={scope} status={err.status}; "
                f"blocked for {self.store.block_duration:.0f}s, rotating"
            )
        else:
            self._logger.warning(
                f"endpoint={endpoint.id} key={hint} scope={scope} failed: {exc}; not rotating"
            )
        return err


# ---------- Sync executor ----------


class FailoverExecutor(_Failover):
    """Run an operation against an endpoint, failing over across its credentials.

    Credentials rejected with 401/403/429 or an insufficient-quota error are
    quarantined for the scope and the next one is tried. Any other error is
    raised at once as UpstreamOtherError. When every attempt was rejected, the
    last UpstreamAuthOrQuotaError is raised.
    """

    def __init__(
        self,
        client_factory=None,
        store: Union[QuarantineStore, None] = None,
        registry: Union[EndpointRegistry, None] = None,
        log_level: Union[int, None] = None,
        **kwargs,
    ):
        super().__init__(
            client_factory or HttpxClientFactory(), store, registry, log_level, **kwargs
        )

    @classmethod
    def from_env(cls, var: Union[str, None] = None, env_path: Union[str, None] = None, **kwargs):
        """Create an executor whose registry is read from the environment."""
        registry = EndpointRegistry.from_env(var or ENDPOINTS_VAR, env_path=env_path)
        return cls(registry=registry, **kwargs)

    def run(
        self,
        endpoint: EndpointRef,
        operation: Callable[[Any], T],
        scope: str = DEFAULT_SCOPE,
    ) -> T:
        """Invoke ``operation(client)`` with the first credential that works.

        `operation` may be called several times in sequence (never concurrently),
        once per credential attempted, so it must be safe to repeat. Without a
        `scope`, quarantine is recorded under DEFAULT_SCOPE ("global").

        Upstream failures are never raised as-is: catch UpstreamError (not e.g.
        httpx.HTTPStatusError) and read the raw exception from ``.original``,
        which is also chained as ``__cause__``.

        Raises:
            ConfigurationError: no endpoint, or the endpoint has no credential
            AllCredentialsBlockedError: every credential is quarantined for `scope`
            UpstreamOtherError: an attempt failed for a non-credential reason
            UpstreamAuthOrQuotaError: every available credential was rejected
        """
        ep = self._resolve(endpoint)
        last_err: Union[UpstreamError, None] = None
        for credential in self._available(ep, scope):
            try:
                with self.client_factory(ep, credential, self.client_config) as client:
                    return operation(client)
            except TurnspitError:
                raise
            except Exception as e:
                err = self._on_failure(e, ep, credential, scope)
                if not isinstance(err, UpstreamAuthOrQuotaError):
                    raise err from e
                last_err = err
        raise last_err


# ---------- Async executor (httpx/aiohttp) ----------


class AsyncFailoverExecutor(_Failover):
    """Async twin of FailoverExecutor; `operation` is a coroutine function."""

    def __init__(
        self,
        client_factory=None,
        store: Union[QuarantineStore, None] = None,
        registry: Union[EndpointRegistry, None] = None,
        log_level: Union[int, None] = None,
        **kwargs,
    ):
        super().__init__(
            client_factory or AsyncHttpxClientFactory(), store, registry, log_level, **kwargs
        )

    @classmethod
    def from_env(cls, var: Union[str, None] = None, env_path: Union[str, None] = None, **kwargs):
        registry = EndpointRegistry.from_env(var or ENDPOINTS_VAR, env_path=env_path)
        return cls(registry=registry, **kwargs)

    async def run(
        self,
        endpoint: EndpointRef,
        operation: Callable[[Any], Awaitable[T]],
        scope: str = DEFAULT_SCOPE,
    ) -> T:
        ep = self._resolve(endpoint)
        last_err: Union[UpstreamError, None] = None
        for credential in self._available(ep, scope):
            try:
                async with self.client_factory(ep, credential, self.client_config) as client:
                    return await operation(client)
            except TurnspitError:
                raise
            except Exception as e:
                err = self._on_failure(e, ep, credential, scope)
                if not isinstance(err, UpstreamAuthOrQuotaError):
                    raise err from e
                last_err = err
        raise last_err
