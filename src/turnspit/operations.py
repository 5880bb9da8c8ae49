"""Ready-made operations for OpenAI-compatible endpoints.

Each helper takes an httpx client produced by the executor's client factory,
raises on HTTP errors so failures can be classified, and returns plain data.
Build a closure with ``functools.partial`` to pass extra arguments:

    executor.run(endpoint, partial(chat_completion, model=m, messages=msgs), "ocr")
"""

LIST_MODELS_SCOPE = "list-models"


def _first_content(payload: dict) -> str | None:
    choices = payload.get("choices") or []
    if not choices:
        return None
    return (choices[0].get("message") or {}).get("content")


def list_models(client) -> list[dict]:
    resp = client.get("models")
    resp.raise_for_status()
    return resp.json().get("data", [])


def chat_completion(client, model: str, messages: list[dict], **params) -> str | None:
    """POST chat/completions and return the first choice's message content."""
    resp = client.post("chat/completions", json={"model": model, "messages": messages, **params})
    resp.raise_for_status()
    return _first_content(resp.json())


async def alist_models(client) -> list[dict]:
    resp = await client.get("models")
    resp.raise_for_status()
    return resp.json().get("data", [])


async def achat_completion(client, model: str, messages: list[dict], **params) -> str | None:
    resp = await client.post(
        "chat/completions", json={"model": model, "messages": messages, **params}
    )
    resp.raise_for_status()
    return _first_content(resp.json())
