import httpx
import requests
from conftest import FakeStatusError

from turnspit import UpstreamAuthOrQuotaError, UpstreamOtherError, classify_error, is_quarantinable
from turnspit.errors import is_insufficient_quota, upstream_status


def _httpx_status_error(status, json_body=None):
    req = httpx.Request("POST", "https://llm.example.com/v1/chat/completions")
    resp = httpx.Response(status, request=req, json=json_body)
    return httpx.HTTPStatusError(f"HTTP {status}", request=req, response=resp)


def _requests_http_error(status):
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"not json"
    return requests.HTTPError(f"HTTP {status}", response=resp)


def test_status_from_httpx():
    assert upstream_status(_httpx_status_error(429)) == 429  # noqa: PLR2004


def test_status_from_requests():
    assert upstream_status(_requests_http_error(403)) == 403  # noqa: PLR2004
    assert upstream_status(requests.HTTPError("no response")) is None


def test_status_from_aiohttp():
    import aiohttp  # noqa: PLC0415

    exc = aiohttp.ClientResponseError(request_info=None, history=(), status=401, message="nope")
    assert upstream_status(exc) == 401  # noqa: PLR2004


def test_status_from_sdk_style_error():
    assert upstream_status(FakeStatusError(500)) == 500  # noqa: PLR2004
    assert upstream_status(ValueError("boom")) is None


def test_quarantinable_statuses():
    for status in (401, 403, 429):
        assert is_quarantinable(_httpx_status_error(status))
    for status in (400, 404, 500, 503):
        assert not is_quarantinable(_httpx_status_error(status))
    assert not is_quarantinable(httpx.ConnectTimeout("timed out"))


def test_insufficient_quota_detection():
    body = {"error": {"message": "You exceeded your quota", "type": "insufficient_quota"}}
    assert is_insufficient_quota(_httpx_status_error(400, body))
    assert is_insufficient_quota(FakeStatusError(400, code="insufficient_quota"))
    assert is_insufficient_quota(RuntimeError("Error code: insufficient_quota"))
    assert not is_insufficient_quota(_httpx_status_error(400, {"error": {"type": "invalid"}}))
    assert not is_insufficient_quota(_requests_http_error(400))


def test_classify_wraps_with_detail():
    original = _httpx_status_error(429)
    err = classify_error(original, "ocr", "sk-abcdef1234")
    assert isinstance(err, UpstreamAuthOrQuotaError)
    assert err.original is original
    assert err.status == 429  # noqa: PLR2004
    assert err.scope == "ocr"
    assert err.credential_hint == "...1234"
    assert "sk-abcdef1234" not in str(err)

    other = classify_error(_httpx_status_error(400), "ocr", "sk-x")
    assert isinstance(other, UpstreamOtherError)
