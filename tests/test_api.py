import pytest
from fastapi.testclient import TestClient

from pricealert.config import Settings
from pricealert.main import create_app
from pricealert.monitors import MonitorService, get_monitor_service
from pricealert.notifier import NotificationError
from pricescrape.schema import ProductRecord, SiteType

URL = "https://www.example-shop.com/redmi-note-13"


class FakeShop:
    def __init__(self):
        self.prices = {}

    async def __call__(self, url):
        price, simulated = self.prices.get(url, (1500.0, False))
        return ProductRecord(url=url, title="Redmi Note 13", price=price, is_simulated=simulated, site_type=SiteType.OTHER)


class Outbox:
    def __init__(self):
        self.sent = []
        self.fail = False

    def __call__(self, *args):
        if self.fail:
            raise NotificationError("smtp down")
        self.sent.append(args)


@pytest.fixture
def shop():
    return FakeShop()


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def client(shop, outbox):
    settings = Settings()
    service = MonitorService(settings, extract=shop, notify=outbox)
    with TestClient(create_app(settings, service)) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestScrape:
    def test_scrape(self, client):
        resp = client.post("/api/scrape", json={"url": URL})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["price"] == 1500.0
        assert body["data"]["title"] == "Redmi Note 13"

    def test_scrape_rejects_non_url(self, client):
        assert client.post("/api/scrape", json={"url": "not a url"}).status_code == 422

    def test_dependency_override(self, client):
        class Broken:
            async def extract(self, url):
                raise ValueError("bad product url")

        client.app.dependency_overrides[get_monitor_service] = lambda: Broken()
        try:
            resp = client.post("/api/scrape", json={"url": URL})
        finally:
            client.app.dependency_overrides.clear()
        assert resp.status_code == 400
        assert resp.json()["detail"] == "bad product url"


class TestMonitors:
    def test_lifecycle(self, client, outbox):
        resp = client.post(
            "/api/monitor",
            json={"url": URL, "email": "buyer@example.com", "target_price": 1000, "check_interval": 3600},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["notified"] is False
        assert body["data"]["check_interval"] == 3600
        assert body["data"]["last_price"] == 1500.0

        listed = client.get("/api/monitors", params={"email": "buyer@example.com"}).json()
        assert [m["url"] for m in listed["data"]] == [URL]

        resp = client.post("/api/monitor/update-price", json={"url": URL, "current_price": 950})
        assert resp.status_code == 200
        assert resp.json()["notified"] is True
        assert resp.json()["data"]["manual_price_update"] is True
        assert len(outbox.sent) == 1

        resp = client.post("/api/monitor/stop", json={"url": URL})
        assert resp.json()["message"].startswith("Stopped")
        resp = client.post("/api/monitor/stop", json={"url": URL})
        assert resp.status_code == 200
        assert resp.json()["message"].startswith("No active monitor")

    def test_default_interval(self, client):
        resp = client.post("/api/monitor", json={"url": URL, "email": "buyer@example.com", "target_price": 1000})
        assert resp.json()["data"]["check_interval"] == 86400

    def test_immediate_notification(self, client, shop, outbox):
        shop.prices[URL] = (900.0, False)
        resp = client.post("/api/monitor", json={"url": URL, "email": "buyer@example.com", "target_price": 1000})
        assert resp.json()["notified"] is True
        assert outbox.sent[0][:4] == ("buyer@example.com", "Redmi Note 13", URL, 1000.0)

    def test_simulated_price_does_not_notify(self, client, shop, outbox):
        shop.prices[URL] = (900.0, True)
        resp = client.post("/api/monitor", json={"url": URL, "email": "buyer@example.com", "target_price": 1000})
        assert resp.json()["notified"] is False
        assert resp.json()["data"]["is_simulated"] is True
        assert outbox.sent == []

    def test_update_unknown_monitor(self, client):
        resp = client.post("/api/monitor/update-price", json={"url": URL, "current_price": 950})
        assert resp.status_code == 404

    @pytest.mark.parametrize(
        "payload",
        [
            {"url": URL, "email": "not-an-email", "target_price": 1000},
            {"url": URL, "email": "buyer@example.com", "target_price": -5},
            {"url": URL, "email": "buyer@example.com"},
        ],
    )
    def test_validation(self, client, payload):
        assert client.post("/api/monitor", json=payload).status_code == 422

    def test_timer_info(self, client):
        body = client.get("/api/timer-info").json()
        assert body["hour"] == 3600
        assert body["day"] == 86400
        assert {"label": "Every 15 minutes", "seconds": 900} in body["suggestions"]


class TestNotify:
    PAYLOAD = {
        "email": "buyer@example.com",
        "product": {"title": "Redmi Note 13", "url": URL, "target_price": 1000, "price": 1500},
        "current_price": 950,
    }

    def test_sends(self, client, outbox):
        resp = client.post("/api/notify", json=self.PAYLOAD)
        assert resp.status_code == 200
        assert outbox.sent == [("buyer@example.com", "Redmi Note 13", URL, 1000.0, 950.0, 1500.0)]

    def test_delivery_failure_is_502(self, client, outbox):
        outbox.fail = True
        assert client.post("/api/notify", json=self.PAYLOAD).status_code == 502

    def test_missing_product_fields(self, client):
        payload = {**self.PAYLOAD, "product": {"url": URL, "target_price": 1000}}
        assert client.post("/api/notify", json=payload).status_code == 422
