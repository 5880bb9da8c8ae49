import json
import logging
import os

from .types import DEFAULT_BASE_URL, EndpointConfig

ENDPOINTS_VAR = "OPENAI_ENDPOINTS"
LEGACY_KEY_VAR = "OPENAI_API_KEY"
LEGACY_URL_VAR = "OPENAI_BASE_URL"

logger = logging.getLogger("turnspit")


def _unquote(val: str) -> str:
    # only a matching outer pair is removed; JSON keeps its inner quotes
    if len(val) >= 2 and val[0] == val[-1] and val[0] in "'\"":  # noqa: PLR2004
        return val[1:-1]
    return val


def _read_dotenv(env_path: str) -> dict[str, str]:
    """KEY=VALUE pairs from a .env file; os.environ is left untouched.

    A missing file reads as empty.
    """
    try:
        with open(env_path) as f:
            lines = [ln.strip() for ln in f]
    except FileNotFoundError:
        return {}
    pairs = (ln.split("=", 1) for ln in lines if "=" in ln and not ln.startswith("#"))
    return {k.strip(): _unquote(v.strip()) for k, v in pairs if k.strip()}


def read_env_value(var: str, env_path: str | None = None) -> str | None:
    """Look up `var`; the real environment takes precedence over the .env file."""
    file_env = _read_dotenv(env_path) if env_path else {}
    env_map: dict[str, str] = {**file_env, **os.environ}
    return env_map.get(var)


def split_credentials(raw: str) -> tuple[str, ...]:
    """Split a comma-separated credential value, trimming and dropping empties."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _field(entry: dict, name: str) -> str | None:
    value = entry.get(name)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_endpoints(raw: str | None) -> list[EndpointConfig]:
    """Decode and validate a JSON endpoint list.

    Each entry looks like ``{"id": ..., "name": ..., "key": "k1,k2", "url": ...,
    "defaultModel": ...}``; ``key`` and ``url`` are required. Invalid entries are
    dropped with a logged reason and malformed input yields an empty list, so
    callers never see a partially-built endpoint.
    """
    if raw is None or not raw.strip():
        return []
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.error(f"failed to parse endpoint configuration: {e}")
        return []
    if not isinstance(parsed, list):
        logger.error(
            f"endpoint configuration must be a JSON list, got {type(parsed).__name__}"
        )
        return []

    endpoints: list[EndpointConfig] = []
    for index, entry in enumerate(parsed):
        if not isinstance(entry, dict):
            logger.warning(f"endpoint entry {index} dropped: not an object")
            continue
        key = _field(entry, "key")
        url = _field(entry, "url")
        if key is None or url is None:
            missing = "key" if key is None else "url"
            logger.warning(f"endpoint entry {index} dropped: missing {missing}")
            continue
        credentials = split_credentials(key)
        if not credentials:
            logger.warning(f"endpoint entry {index} dropped: no usable credential")
            continue
        endpoints.append(
            EndpointConfig(
                id=_field(entry, "id") or f"custom-{index}",
                name=_field(entry, "name") or f"Endpoint {index + 1}",
                credentials=credentials,
                base_url=url,
                default_model=_field(entry, "defaultModel"),
            )
        )
    return endpoints


def load_endpoints_from_env(
    var: str = ENDPOINTS_VAR, env_path: str | None = None
) -> list[EndpointConfig]:
    """Read and parse the endpoint list from the environment (or a .env file)."""
    return parse_endpoints(read_env_value(var, env_path))


def load_legacy_endpoint(
    key_var: str = LEGACY_KEY_VAR,
    url_var: str = LEGACY_URL_VAR,
    env_path: str | None = None,
) -> EndpointConfig | None:
    """Build the single-endpoint configuration from OPENAI_API_KEY/OPENAI_BASE_URL.

    Returns None when no credential is configured.
    """
    credentials = split_credentials(read_env_value(key_var, env_path) or "")
    if not credentials:
        return None
    base_url = (read_env_value(url_var, env_path) or "").strip() or DEFAULT_BASE_URL
    return EndpointConfig(
        id="default",
        name="Default",
        credentials=credentials,
        base_url=base_url,
    )
