"""Shared fixtures. Environment is set before any storefront import."""
import os

os.environ["SANITY_PROJECT_ID"] = "test-project"
os.environ["SANITY_DATASET"] = "production"
os.environ["DATABASE_URL"] = "sqlite://"

import json
import httpx
import pytest
from storefront.content.api import CatalogAPI
from storefront.content.cache import RequestCache
from storefront.content.client import ContentStoreClient
from storefront.content.images import ImageUrlBuilder


class FakeContentStore:
    """In-process stand-in for the content store query endpoint."""

    def __init__(self):
        self.results = {}
        self.requests = []
        self.status_code = 200
        self.error_body = None

    def respond(self, query_class, result):
        """Register the result for a query class (a value or a callable of the params)."""
        self.results[query_class.groq] = result

    def fail(self, status_code, description="Something went wrong"):
        self.status_code = status_code
        self.error_body = {"error": {"description": description}}

    def recover(self):
        self.status_code = 200
        self.error_body = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.error_body)

        query = request.url.params["query"]
        params = {
            name[1:]: json.loads(value)
            for name, value in request.url.params.items()
            if name.startswith("$")
        }
        result = self.results.get(query)
        if callable(result):
            result = result(params)
        return httpx.Response(200, json={"ms": 1, "query": query, "result": result})

    def calls(self, query_class) -> int:
        return sum(1 for r in self.requests if r.url.params["query"] == query_class.groq)

    def params_of(self, query_class):
        """Decoded parameters of the most recent request for a query class."""
        for request in reversed(self.requests):
            if request.url.params["query"] == query_class.groq:
                return {
                    name[1:]: json.loads(value)
                    for name, value in request.url.params.items()
                    if name.startswith("$")
                }
        return None


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store():
    return FakeContentStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def content_client(store):
    return ContentStoreClient("test-project", transport=httpx.MockTransport(store.handler))


@pytest.fixture
def api(content_client, clock):
    return CatalogAPI(content_client, cache=RequestCache(dedupe_interval=2.0, clock=clock))


@pytest.fixture
def images():
    return ImageUrlBuilder("test-project", "production")
