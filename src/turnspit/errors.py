"""Error taxonomy for the failover executor and upstream error classification.

Classification is duck-typed so that errors raised through httpx, requests,
aiohttp or an OpenAI-style SDK are all recognised without importing them.
"""

import contextlib
from typing import Union

# 401 Unauthorized, 403 Forbidden, 429 Too Many Requests
QUARANTINE_STATUSES = frozenset({401, 403, 429})
INSUFFICIENT_QUOTA = "insufficient_quota"


def mask_credential(credential: str) -> str:
    return f"...{credential[-4:]}"


class TurnspitError(Exception):
    """Base class for every error raised by turnspit."""


class ConfigurationError(TurnspitError):
    """No endpoint resolved, or the endpoint has no usable credential."""


class AllCredentialsBlockedError(TurnspitError):
    def __init__(self, scope: str, endpoint_id: Union[str, None] = None):
        self.scope = scope
        self.endpoint_id = endpoint_id
        where = f" on endpoint '{endpoint_id}'" if endpoint_id else ""
        super().__init__(
            f"all credentials{where} are currently blocked for scope '{scope}'"
        )


class UpstreamError(TurnspitError):
    """An attempt against the upstream failed.

    `original` is the exception raised by the operation (also chained as
    ``__cause__``); `status` is the HTTP status when one could be extracted.
    """

    def __init__(
        self,
        original: BaseException,
        scope: str,
        status: Union[int, None] = None,
        credential_hint: Union[str, None] = None,
    ):
        self.original = original
        self.scope = scope
        self.status = status
        self.credential_hint = credential_hint
        detail = f"status={status} " if status is not None else ""
        super().__init__(f"{detail}scope={scope}: {original}")


class UpstreamAuthOrQuotaError(UpstreamError):
    """401/403/429 or an insufficient-quota signal; the credential gets quarantined."""


class UpstreamOtherError(UpstreamError):
    """Any other failure: bad request, server fault, network error or timeout."""


def _as_status(value) -> Union[int, None]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def upstream_status(exc: BaseException) -> Union[int, None]:
    """Best-effort HTTP status of an upstream exception, or None."""
    # openai.APIStatusError exposes status_code, aiohttp.ClientResponseError status
    for attr in ("status_code", "status"):
        status = _as_status(getattr(exc, attr, None))
        if status is not None:
            return status
    # httpx.HTTPStatusError / requests.HTTPError carry the response
    response = getattr(exc, "response", None)
    if response is not None:
        for attr in ("status_code", "status"):
            status = _as_status(getattr(response, attr, None))
            if status is not None:
                return status
    return None


def _mentions_quota(payload) -> bool:
    if isinstance(payload, str):
        return payload == INSUFFICIENT_QUOTA
    if isinstance(payload, dict):
        if INSUFFICIENT_QUOTA in (payload.get("code"), payload.get("type")):
            return True
        return _mentions_quota(payload.get("error"))
    return False


def is_insufficient_quota(exc: BaseException) -> bool:
    # instance attribute only: aiohttp's deprecated `code` property warns on access
    if _mentions_quota(vars(exc).get("code")):
        return True
    if _mentions_quota(getattr(exc, "body", None)):
        return True
    response = getattr(exc, "response", None)
    json_fn = getattr(response, "json", None)
    if callable(json_fn):
        # unread streaming bodies and non-JSON payloads are not quota signals
        with contextlib.suppress(ValueError, RuntimeError, TypeError):
            if _mentions_quota(json_fn()):
                return True
    message = str(exc).lower()
    return INSUFFICIENT_QUOTA in message or "insufficient quota" in message


def is_quarantinable(exc: BaseException) -> bool:
    return upstream_status(exc) in QUARANTINE_STATUSES or is_insufficient_quota(exc)


def classify_error(exc: BaseException, scope: str, credential: str) -> UpstreamError:
    """Wrap `exc` in UpstreamAuthOrQuotaError or UpstreamOtherError."""
    cls = UpstreamAuthOrQuotaError if is_quarantinable(exc) else UpstreamOtherError
    return cls(
        exc,
        scope=scope,
        status=upstream_status(exc),
        credential_hint=mask_credential(credential),
    )
