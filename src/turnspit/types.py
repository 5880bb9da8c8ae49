from dataclasses import dataclass

# Quarantine window for a (credential, scope) pair, in seconds.
BLOCK_DURATION = 24 * 60 * 60
# Per-call upstream timeout, in seconds.
DEFAULT_TIMEOUT = 30.0
DEFAULT_SCOPE = "global"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class EndpointPublic:
    id: str
    name: str
    default_model: str | None = None


@dataclass(frozen=True)
class EndpointConfig:
    id: str
    name: str
    # Attempt order is declaration order.
    credentials: tuple[str, ...]
    base_url: str
    default_model: str | None = None

    def public(self) -> EndpointPublic:
        """Secret-free view of this endpoint."""
        return EndpointPublic(id=self.id, name=self.name, default_model=self.default_model)

    def __repr__(self) -> str:
        return (
            f"EndpointConfig(id={self.id!r}, name={self.name!r}, "
            f"credentials=<{len(self.credentials)}>, base_url={self.base_url!r}, "
            f"default_model={self.default_model!r})"
        )


@dataclass(frozen=True)
class ClientConfig:
    timeout: float = DEFAULT_TIMEOUT
    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"

    def auth_headers(self, credential: str) -> dict[str, str]:
        return {self.auth_header: f"{self.auth_scheme} {credential}".strip()}
