"""Tests for remote log shipping."""

import json
import logging

import httpx
import pytest

from app import build_app
from config import Config
from shortlinks.service import ShortlinkService
from shortlinks.telemetry import (
    TELEMETRY_LOGGER_NAME,
    TelemetryClient,
    TelemetryHandler,
    package_for_logger,
    python_level_to_api,
)

CREDENTIALS = {"email": "ops@example.com", "clientID": "id-1", "clientSecret": "s3cret"}


class FakeLogApi:
    """Scripted stand-in for the log API behind an httpx.MockTransport."""

    def __init__(self, auth_status=200, logs_status=200, token_expires_at=2000.0):
        self.auth_status = auth_status
        self.logs_status = logs_status
        self.token_expires_at = token_expires_at
        self.auth_calls = 0
        self.logs = []
        self.auth_headers = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth":
            self.auth_calls += 1
            if self.auth_status >= 400:
                return httpx.Response(self.auth_status, json={"message": "denied"})
            return httpx.Response(200, json={
                "access_token": f"token-{self.auth_calls}",
                "expires_in": self.token_expires_at,
            })
        if request.url.path == "/logs":
            self.auth_headers.append(request.headers.get("authorization"))
            self.logs.append(json.loads(request.content))
            if self.logs_status >= 400:
                return httpx.Response(self.logs_status, json={"message": "nope"})
            return httpx.Response(200, json={"logID": f"log-{len(self.logs)}", "message": "log created"})
        return httpx.Response(404)


class ManualTime:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_client(api, clock=None):
    return TelemetryClient(
        api_base_url="http://logs.test/",
        credentials=CREDENTIALS,
        transport=httpx.MockTransport(api),
        clock=clock or ManualTime(),
    )


class TestLevelAndPackageMapping:
    """Mapping Python log records onto the log API's vocabulary."""

    @pytest.mark.parametrize("levelno,expected", [
        (logging.DEBUG, "debug"),
        (logging.INFO, "info"),
        (logging.WARNING, "warn"),
        (logging.ERROR, "error"),
        (logging.CRITICAL, "fatal"),
    ])
    def test_python_level_to_api(self, levelno, expected):
        assert python_level_to_api(levelno) == expected

    @pytest.mark.parametrize("name,expected", [
        ("shortlinks.store.memory", "db"),
        ("shortlinks.store", "db"),
        ("shortlinks.service", "service"),
        ("shortlinks.web", "handler"),
        ("shortlinks.api", "route"),
        ("shortlinks.config", "config"),
        ("shortlinks.common.validators", "utils"),
        ("uvicorn.error", "utils"),
        ("shortlinks.storefront", "utils"),
    ])
    def test_package_for_logger(self, name, expected):
        assert package_for_logger(name) == expected


@pytest.mark.asyncio
class TestTelemetryClient:
    """Token handling and delivery against a mocked log API."""

    async def test_send_log_payload_and_auth_header(self):
        api = FakeLogApi()
        client = make_client(api)

        result = await client.send_log("info", "service", "created abc123")

        assert result == {"logID": "log-1", "message": "log created"}
        assert api.logs == [{
            "stack": "backend",
            "level": "info",
            "package": "service",
            "message": "created abc123",
        }]
        assert api.auth_headers == ["Bearer token-1"]
        await client.close()

    async def test_token_is_cached_until_expiry(self):
        api = FakeLogApi(token_expires_at=2000.0)
        clock = ManualTime(1000.0)
        client = make_client(api, clock)

        await client.send_log("info", "db", "one")
        await client.send_log("info", "db", "two")
        assert api.auth_calls == 1

        clock.now = 2000.0
        await client.send_log("info", "db", "three")

        assert api.auth_calls == 2
        assert api.auth_headers[-1] == "Bearer token-2"
        await client.close()

    async def test_invalid_level_and_package_are_coerced(self):
        api = FakeLogApi()
        client = make_client(api)

        await client.send_log("verbose", "frontend", "hello")

        assert api.logs[0]["level"] == "info"
        assert api.logs[0]["package"] == "utils"
        await client.close()

    async def test_auth_failure_returns_none(self):
        api = FakeLogApi(auth_status=500)
        client = make_client(api)

        assert await client.send_log("error", "db", "boom") is None
        assert api.logs == []
        await client.close()

    async def test_logs_failure_returns_none(self):
        api = FakeLogApi(logs_status=500)
        client = make_client(api)

        assert await client.send_log("error", "db", "boom") is None
        await client.close()

    async def test_transport_error_returns_none(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(unreachable)

        assert await client.send_log("info", "db", "lost") is None
        await client.close()

    async def test_unauthorized_clears_cached_token(self):
        api = FakeLogApi(logs_status=401)
        client = make_client(api)

        assert await client.send_log("info", "db", "first") is None
        api.logs_status = 200
        await client.send_log("info", "db", "second")

        assert api.auth_calls == 2
        assert api.auth_headers == ["Bearer token-1", "Bearer token-2"]
        await client.close()

    async def test_failures_reported_on_telemetry_logger(self, caplog):
        client = make_client(FakeLogApi(auth_status=403))

        with caplog.at_level(logging.WARNING, logger=TELEMETRY_LOGGER_NAME):
            await client.send_log("info", "db", "x")

        assert any("Failed to send log" in r.getMessage() for r in caplog.records)
        await client.close()

    async def test_service_close_closes_telemetry(self, store):
        client = make_client(FakeLogApi())
        service = ShortlinkService(store=store, telemetry=client)

        await service.close()

        assert client._client.is_closed


class TestTelemetryHandler:
    """Forwarding log records as background shipments."""

    @pytest.mark.asyncio
    async def test_records_are_shipped(self):
        api = FakeLogApi()
        handler = TelemetryHandler(make_client(api))
        handler.setFormatter(logging.Formatter("%(message)s"))
        record = logging.makeLogRecord({
            "name": "shortlinks.store.memory",
            "levelno": logging.WARNING,
            "levelname": "WARNING",
            "msg": "Shortcode 'abc' already exists",
        })

        handler.handle(record)
        await handler.flush_pending()

        assert api.logs == [{
            "stack": "backend",
            "level": "warn",
            "package": "db",
            "message": "Shortcode 'abc' already exists",
        }]
        await handler.client.close()

    @pytest.mark.asyncio
    async def test_telemetry_logger_is_not_shipped(self):
        api = FakeLogApi()
        handler = TelemetryHandler(make_client(api))
        record = logging.makeLogRecord({
            "name": TELEMETRY_LOGGER_NAME,
            "levelno": logging.WARNING,
            "msg": "Failed to send log",
        })

        handler.handle(record)
        await handler.flush_pending()

        assert api.logs == []
        await handler.client.close()

    @pytest.mark.asyncio
    async def test_below_handler_level_is_dropped(self):
        api = FakeLogApi()
        handler = TelemetryHandler(make_client(api), level=logging.INFO)
        logger = logging.getLogger("shortlinks.service")
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)

        try:
            logger.debug("noise")
            logger.info("signal")
            await handler.flush_pending()
        finally:
            logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        assert [entry["message"] for entry in api.logs] == ["signal"]
        await handler.client.close()

    def test_dropped_without_running_loop(self):
        api = FakeLogApi()
        handler = TelemetryHandler(make_client(api))
        record = logging.makeLogRecord({
            "name": "shortlinks.service",
            "levelno": logging.INFO,
            "msg": "no loop here",
        })

        handler.handle(record)

        assert not handler._pending
        assert api.logs == []


class TestTelemetryConfig:
    """Telemetry settings on Config."""

    def test_disabled_without_url(self):
        assert not Config().telemetry_enabled

    def test_credentials_use_api_field_names(self):
        config = Config(
            telemetry_url="http://logs.test",
            telemetry_email="ops@example.com",
            telemetry_name="Ops",
            telemetry_roll_no="42",
            telemetry_access_code="abc",
            telemetry_client_id="id-1",
            telemetry_client_secret="s3cret",
        )

        assert config.telemetry_enabled
        assert config.telemetry_credentials() == {
            "email": "ops@example.com",
            "name": "Ops",
            "rollNo": "42",
            "accessCode": "abc",
            "clientID": "id-1",
            "clientSecret": "s3cret",
        }

    def test_build_app_attaches_telemetry_handler(self):
        app = build_app(Config(base_url="http://testserver", telemetry_url="http://logs.test"))

        handlers = logging.getLogger("shortlinks").handlers
        assert any(isinstance(h, TelemetryHandler) for h in handlers)
        assert app.state.service.telemetry is not None

    def test_build_app_without_telemetry(self):
        app = build_app(Config(base_url="http://testserver"))

        handlers = logging.getLogger("shortlinks").handlers
        assert not any(isinstance(h, TelemetryHandler) for h in handlers)
        assert app.state.service.telemetry is None
