import pytest

from nvidia_dl.core.models import CatalogEntry


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None, chunks=()):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}
        self._chunks = list(chunks)

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size=1):
        return iter(self._chunks)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Records calls and answers from a url -> response (or exception) map."""
    def __init__(self, routes=None, default=None):
        self.routes = routes or {}
        self.default = default if default is not None else FakeResponse(404)
        self.calls = []

    def _answer(self, method, url, **kw):
        self.calls.append((method, url, kw))
        r = self.routes.get(url, self.default)
        if isinstance(r, Exception):
            raise r
        return r

    def head(self, url, **kw):
        return self._answer("HEAD", url, **kw)

    def get(self, url, **kw):
        return self._answer("GET", url, **kw)


@pytest.fixture
def gpus():
    return [
        CatalogEntry("GeForce RTX 3080", 120, 929),
        CatalogEntry("GeForce RTX 3090", 120, 930),
        CatalogEntry("GeForce RTX 3090 Ti", 120, 985),
        CatalogEntry("GeForce GTX 1060", 101, 815),
        CatalogEntry("GeForce GTX 1060", 102, 816),
        CatalogEntry("TITAN RTX", 110, 882),
    ]
