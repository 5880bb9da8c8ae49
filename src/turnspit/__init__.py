from .adapters import (
    AiohttpClient,
    AiohttpClientFactory,
    AsyncHttpxClientFactory,
    HttpxClientFactory,
    RequestsClientFactory,
)
from .env import load_endpoints_from_env, load_legacy_endpoint, parse_endpoints, split_credentials
from .errors import (
    AllCredentialsBlockedError,
    ConfigurationError,
    TurnspitError,
    UpstreamAuthOrQuotaError,
    UpstreamError,
    UpstreamOtherError,
    classify_error,
    is_quarantinable,
)
from .executor import AsyncFailoverExecutor, FailoverExecutor
from .quarantine import QuarantineStore, get_quarantine_store
from .registry import EndpointRegistry
from .state import QuarantineEntry
from .types import (
    BLOCK_DURATION,
    DEFAULT_SCOPE,
    DEFAULT_TIMEOUT,
    ClientConfig,
    EndpointConfig,
    EndpointPublic,
)

__all__ = [
    "EndpointConfig",
    "EndpointPublic",
    "ClientConfig",
    "BLOCK_DURATION",
    "DEFAULT_SCOPE",
    "DEFAULT_TIMEOUT",
    "EndpointRegistry",
    "QuarantineStore",
    "QuarantineEntry",
    "get_quarantine_store",
    "FailoverExecutor",
    "AsyncFailoverExecutor",
    "HttpxClientFactory",
    "AsyncHttpxClientFactory",
    "RequestsClientFactory",
    "AiohttpClientFactory",
    "AiohttpClient",
    "TurnspitError",
    "ConfigurationError",
    "AllCredentialsBlockedError",
    "UpstreamError",
    "UpstreamAuthOrQuotaError",
    "UpstreamOtherError",
    "classify_error",
    "is_quarantinable",
    "load_endpoints_from_env",
    "load_legacy_endpoint",
    "parse_endpoints",
    "split_credentials",
]
