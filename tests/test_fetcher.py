import asyncio
import time

import pytest
import requests

from pricescrape import fetcher
from pricescrape.fetcher import FetchError, fetch_generic, fetch_html, fetch_with_rotation
from pricescrape.schema import SiteType


class FakeResponse:
    def __init__(self, status_code=200, text="<html></html>"):
        self.status_code = status_code
        self.text = text
        self.headers = {"Content-Type": "text/html; charset=utf-8"}
        self.encoding = "utf-8"
        self.apparent_encoding = "utf-8"


class FakeGet:
    """Replays queued responses (or exceptions) and records every call."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, url, headers=None, timeout=None, allow_redirects=True):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout, "allow_redirects": allow_redirects})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_get(monkeypatch):
    def install(*outcomes):
        fake = FakeGet(*outcomes)
        monkeypatch.setattr(fetcher.requests, "get", fake)
        return fake
    return install


class TestFetchGeneric:
    def test_ok(self, fake_get):
        fake = fake_get(FakeResponse(200, "<h1>ok</h1>"))
        assert asyncio.run(fetch_generic("https://example.com/a", timeout=3)) == "<h1>ok</h1>"
        assert fake.calls[0]["timeout"] == 3
        assert fake.calls[0]["headers"]["User-Agent"] == fetcher.UA

    def test_non_200_keeps_partial_body(self, fake_get):
        fake_get(FakeResponse(403, "<p>denied ₹1,999</p>"))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(fetch_generic("https://example.com/a"))
        assert exc_info.value.status == 403
        assert exc_info.value.partial == "<p>denied ₹1,999</p>"

    def test_transport_error(self, fake_get):
        fake_get(requests.ConnectionError("refused"))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(fetch_generic("https://example.com/a"))
        assert exc_info.value.status is None
        assert exc_info.value.partial is None


class TestRotation:
    def test_succeeds_on_later_profile(self, fake_get):
        fake = fake_get(FakeResponse(403, "blocked"), requests.Timeout("slow"), FakeResponse(200, "page"))
        html = asyncio.run(fetch_with_rotation("https://www.flipkart.com/x/p/itm1", retry_delay=0))
        assert html == "page"
        assert len(fake.calls) == 3
        assert all(call["allow_redirects"] is False for call in fake.calls)
        agents = [call["headers"]["User-Agent"] for call in fake.calls]
        assert len(set(agents)) == 3

    def test_all_profiles_fail(self, fake_get):
        fake = fake_get(FakeResponse(529, "challenge"))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(fetch_with_rotation("https://www.flipkart.com/x/p/itm1", retry_delay=0))
        assert len(fake.calls) == len(fetcher.IDENTITY_PROFILES)
        assert exc_info.value.status == 529
        assert exc_info.value.partial == "challenge"


class TestFetchHtml:
    def test_flipkart_uses_rotation_and_specialized_timeout(self, fake_get):
        fake = fake_get(FakeResponse(200, "page"))
        asyncio.run(fetch_html("https://www.flipkart.com/x/p/itm1", SiteType.FLIPKART, specialized_timeout=7))
        assert fake.calls[0]["timeout"] == 7
        assert fake.calls[0]["allow_redirects"] is False

    def test_other_sites_use_generic(self, fake_get):
        fake = fake_get(FakeResponse(200, "page"))
        asyncio.run(fetch_html("https://www.amazon.in/dp/B0CHX1W1XY", SiteType.AMAZON, timeout=4))
        assert fake.calls[0]["timeout"] == 4
        assert fake.calls[0]["allow_redirects"] is True


class TestDeadline:
    @pytest.fixture
    def slow_get(self, monkeypatch):
        calls = []

        def get(url, headers=None, timeout=None, allow_redirects=True):
            calls.append(url)
            time.sleep(0.5)
            return FakeResponse(200, "late")

        monkeypatch.setattr(fetcher, "DEADLINE_MARGIN", 0)
        monkeypatch.setattr(fetcher.requests, "get", get)
        return calls

    def test_generic_request_is_abandoned_at_deadline(self, slow_get):
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(fetch_generic("https://example.com/a", timeout=0.05))
        assert exc_info.value.status is None
        assert exc_info.value.partial is None

    def test_rotation_moves_on_after_each_deadline(self, slow_get):
        with pytest.raises(FetchError):
            asyncio.run(fetch_with_rotation("https://www.flipkart.com/x/p/itm1", timeout=0.05, retry_delay=0))
        assert len(slow_get) == len(fetcher.IDENTITY_PROFILES)
