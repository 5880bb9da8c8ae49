from collections.abc import Iterable, Iterator
from typing import Union

from .env import ENDPOINTS_VAR, load_endpoints_from_env
from .types import EndpointConfig, EndpointPublic


class EndpointRegistry:
    """Immutable, ordered snapshot of the configured upstream endpoints."""

    def __init__(self, endpoints: Iterable[EndpointConfig] = ()):
        self._endpoints: tuple[EndpointConfig, ...] = tuple(endpoints)

    @classmethod
    def from_env(cls, var: str = ENDPOINTS_VAR, env_path: Union[str, None] = None):
        """Build a registry from a JSON endpoint list held in `var`.

        Args:
            var (str, optional): environment variable name. Defaults to OPENAI_ENDPOINTS.
            env_path (Union[str, None], optional): .env file consulted when the
                variable is not set in the process environment.
        """
        return cls(load_endpoints_from_env(var=var, env_path=env_path))

    def list_endpoints(self) -> list[EndpointConfig]:
        return list(self._endpoints)

    def resolve(self, endpoint_id: Union[str, None] = None) -> Union[EndpointConfig, None]:
        """Return the endpoint with `endpoint_id`, else the first one, else None."""
        if not self._endpoints:
            return None
        if endpoint_id:
            for ep in self._endpoints:
                if ep.id == endpoint_id:
                    return ep
        return self._endpoints[0]

    def public_endpoints(self) -> list[EndpointPublic]:
        return [ep.public() for ep in self._endpoints]

    def __len__(self) -> int:
        return len(self._endpoints)

    def __iter__(self) -> Iterator[EndpointConfig]:
        return iter(self._endpoints)
