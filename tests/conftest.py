"""
Test configuration and fixtures for Qingping exporter tests.
"""
import copy
from datetime import datetime, timedelta, timezone

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from prometheus_client import CollectorRegistry

from qingping_exporter.data_models import ExporterConfig
from qingping_exporter.metrics import AirMonitorMetrics


DEVICE_LIST = {
    "total": 1,
    "devices": [
        {
            "info": {
                "mac": "34CE00000000",
                "product": {
                    "id": 1201,
                    "code": "CGDN1",
                    "name": "青萍空气检测仪 Lite",
                    "en_name": "Qingping Air Monitor Lite",
                    "noBleSetting": False
                },
                "name": "Living Room",
                "version": "1.0.4",
                "created_at": 1726740000,
                "group_id": 0,
                "group_name": "",
                "status": {"offline": False},
                "connection_type": "WIFI",
                "setting": {"report_interval": 900, "collect_interval": 900}
            }
        }
    ]
}

DATA_HISTORY = {
    "total": 2,
    "data": [
        {
            "timestamp": {"value": 1726749900},
            "battery": {"value": 47},
            "temperature": {"value": 25.6},
            "humidity": {"value": 58.3},
            "co2": {"value": 454},
            "pm25": {"value": 12},
            "pm10": {"value": 12}
        },
        {
            "timestamp": {"value": 1726750800},
            "battery": {"value": 44},
            "temperature": {"value": 26.1},
            "humidity": {"value": 56},
            "co2": {"value": 452},
            "pm25": {"value": 11},
            "pm10": {"value": 13}
        }
    ]
}


class FakeClock:
    """Controllable replacement for ``utc_now``"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta):
        self.now = self.now + delta


class FakeQingpingAPI:
    """In-process stand-in for the Qingping OAuth and device endpoints."""

    def __init__(self):
        self.base_url = ""
        self.token_requests = []
        self.api_requests = []

        self.token_status = 200
        self.token_body = {"access_token": "test-token", "expires_in": 3600}
        self.devices_status = 200
        self.devices_body = copy.deepcopy(DEVICE_LIST)
        self.history_status = 200
        self.history_bodies = {"34CE00000000": copy.deepcopy(DATA_HISTORY)}
        self.settings_status = 200

        self.app = web.Application()
        self.app.router.add_post("/oauth2/token", self.token)
        self.app.router.add_get("/v1/apis/devices", self.devices)
        self.app.router.add_get("/v1/apis/devices/data", self.history)
        self.app.router.add_put("/v1/apis/devices/settings", self.settings)

    @property
    def oauth_url(self) -> str:
        return f"{self.base_url}/oauth2/token"

    @staticmethod
    def _respond(status, body):
        if isinstance(body, str):
            return web.Response(text=body, status=status)
        return web.json_response(body, status=status)

    async def _record(self, request, body=None):
        self.api_requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": dict(request.headers),
            "body": body,
        })

    async def token(self, request):
        form = await request.post()
        self.token_requests.append({
            "form": dict(form),
            "headers": dict(request.headers),
        })
        return self._respond(self.token_status, self.token_body)

    async def devices(self, request):
        await self._record(request)
        return self._respond(self.devices_status, self.devices_body)

    async def history(self, request):
        await self._record(request)
        body = self.history_bodies.get(request.query.get("mac"), {"total": 0, "data": []})
        return self._respond(self.history_status, body)

    async def settings(self, request):
        body = await request.json()
        await self._record(request, body)
        return self._respond(self.settings_status, {"status": "success"})


@pytest.fixture
def clock():
    """Fake clock starting shortly after the sample readings."""
    return FakeClock(datetime(2024, 9, 19, 13, 0, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def fake_api():
    """Start the fake Qingping API on a local port."""
    api = FakeQingpingAPI()
    server = TestServer(api.app)
    await server.start_server()
    api.base_url = str(server.make_url("/")).rstrip("/")
    yield api
    await server.close()


@pytest.fixture
def config(fake_api):
    """Exporter configuration pointing at the fake API."""
    return ExporterConfig(
        app_key="foo",
        app_secret="bar",
        base_url=fake_api.base_url,
        oauth_url=fake_api.oauth_url,
    )


@pytest_asyncio.fixture
async def http_session():
    """Plain aiohttp session, closed after the test."""
    session = aiohttp.ClientSession()
    yield session
    await session.close()


@pytest.fixture
def registry():
    """Fresh Prometheus registry so tests never share series."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    """Metric surface bound to the per-test registry."""
    return AirMonitorMetrics(registry)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on file location."""
    for item in items:
        path = str(item.fspath).replace("\\", "/")
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)
