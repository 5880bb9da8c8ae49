import contextlib

import pytest

from turnspit import EndpointConfig, QuarantineStore


class FakeStatusError(Exception):
    """Exception shaped like openai.APIStatusError."""

    def __init__(self, status_code, message="upstream error", code=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class FakeClient:
    def __init__(self, credential):
        self.credential = credential
        self.closed = False


class RecordingFactory:
    """Client factory that hands out FakeClient objects and records them."""

    def __init__(self):
        self.clients: list[FakeClient] = []

    @contextlib.contextmanager
    def __call__(self, endpoint, credential, config):
        client = FakeClient(credential)
        self.clients.append(client)
        try:
            yield client
        finally:
            client.closed = True


class AsyncRecordingFactory(RecordingFactory):
    @contextlib.asynccontextmanager
    async def __call__(self, endpoint, credential, config):
        client = FakeClient(credential)
        self.clients.append(client)
        try:
            yield client
        finally:
            client.closed = True


@pytest.fixture
def store():
    return QuarantineStore()


@pytest.fixture
def endpoint():
    return EndpointConfig(
        id="main",
        name="Main",
        credentials=("k1", "k2", "k3"),
        base_url="https://llm.example.com/v1",
    )
