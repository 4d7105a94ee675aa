import httpx
import pytest

from streamnet.cache.manager import PersistentCache


@pytest.fixture
def cache(tmp_path):
    """PersistentCache rooted in a temp directory."""
    mgr = PersistentCache(root=tmp_path / "cache")
    yield mgr
    mgr.clear_all()


@pytest.fixture
def no_sleep():
    """Async sleep replacement that records requested delays."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


class Recorder:
    """httpx.MockTransport handler that replays canned responses and counts calls."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responses)) - 1
        outcome = self._responses[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def recorder():
    """Factory: ``recorder(resp1, resp2, ...)`` → (Recorder, AsyncClient). Last response repeats."""
    clients: list[httpx.AsyncClient] = []

    def _make(*responses):
        rec = Recorder(*responses)
        client = httpx.AsyncClient(transport=httpx.MockTransport(rec))
        clients.append(client)
        return rec, client

    return _make
