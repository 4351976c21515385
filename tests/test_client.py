"""Tests for the API client accessor."""

from decimal import Decimal

import httpx
import pytest

from src.calculations.schemas import CalculationCreate
from src.client.api import CalculatorClient, handle_response
from src.client.exceptions import ApiError
from src.config import Settings
from src.main import create_app

BASE_URL = "http://calc.test/api"

RECORD = {
    "id": 7,
    "operand1": 2.0,
    "operator": "+",
    "operand2": 3.0,
    "result": 5.0,
    "timestamp": "2026-10-18T12:00:00+00:00",
}


def _client(handler) -> CalculatorClient:
    return CalculatorClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


def _calculation(operand1="2", operator="+", operand2="3", result="5") -> CalculationCreate:
    return CalculationCreate(
        operand1=Decimal(operand1),
        operator=operator,
        operand2=Decimal(operand2),
        result=Decimal(result),
    )


class TestHandleResponse:
    """Tests for envelope unwrapping."""

    def test_success_returns_data(self):
        response = httpx.Response(200, json={"success": True, "message": "ok", "data": [1]})
        assert handle_response(response) == [1]

    def test_non_json_body(self):
        response = httpx.Response(200, text="<html>oops</html>", headers={"content-type": "text/html"})
        with pytest.raises(ApiError) as exc_info:
            handle_response(response)
        assert exc_info.value.status == 200
        assert exc_info.value.message == "Server returned non-JSON response"

    def test_success_false_with_2xx(self):
        response = httpx.Response(200, json={"success": False, "message": "nope", "data": None})
        with pytest.raises(ApiError) as exc_info:
            handle_response(response)
        assert exc_info.value.status == 200
        assert exc_info.value.message == "nope"

    def test_error_status_uses_server_message(self):
        response = httpx.Response(404, json={"success": False, "message": "Calculation not found"})
        with pytest.raises(ApiError) as exc_info:
            handle_response(response)
        assert exc_info.value.status == 404
        assert exc_info.value.message == "Calculation not found"
        assert exc_info.value.is_network_error is False

    def test_error_status_without_message(self):
        response = httpx.Response(502, json={})
        with pytest.raises(ApiError) as exc_info:
            handle_response(response)
        assert exc_info.value.message == "HTTP 502: Request failed"


class TestCalculatorClient:
    """Tests for CalculatorClient against a mock transport."""

    @pytest.mark.asyncio
    async def test_save_calculation(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            return httpx.Response(
                201, json={"success": True, "message": "created", "data": RECORD}
            )

        async with _client(handler) as client:
            saved = await client.save_calculation(_calculation())

        assert seen["method"] == "POST"
        assert seen["url"] == f"{BASE_URL}/calculations"
        assert b'"operator":"+"' in seen["body"].replace(b" ", b"")
        assert saved.id == 7
        assert saved.result == Decimal("5")

    @pytest.mark.asyncio
    async def test_every_request_uses_timeout(self):
        timeouts = []

        def handler(request: httpx.Request) -> httpx.Response:
            timeouts.append(request.extensions["timeout"])
            return httpx.Response(200, json={"success": True, "message": "ok", "data": []})

        client = CalculatorClient(
            base_url=BASE_URL, timeout=10.0, transport=httpx.MockTransport(handler)
        )
        async with client:
            await client.get_calculations()

        assert timeouts[0]["read"] == 10.0
        assert timeouts[0]["connect"] == 10.0

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_calculations()

        assert exc_info.value.status == 0
        assert exc_info.value.is_network_error is True
        assert exc_info.value.message.startswith("Network error")

    @pytest.mark.asyncio
    async def test_connection_error_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.save_calculation(_calculation())

        assert exc_info.value.status == 0
        assert "save calculation" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_server_rejection_keeps_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={
                    "success": False,
                    "message": "Calculation error: 2 + 3 should equal 5, not 6",
                    "data": None,
                },
            )

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.save_calculation(_calculation(result="6"))

        assert exc_info.value.status == 400
        assert exc_info.value.message == "Calculation error: 2 + 3 should equal 5, not 6"

    @pytest.mark.asyncio
    async def test_delete_calls(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/calculations"):
                data = {"deletedCount": 4}
            else:
                data = {"id": int(request.url.path.rsplit("/", 1)[-1])}
            return httpx.Response(200, json={"success": True, "message": "ok", "data": data})

        async with _client(handler) as client:
            assert await client.delete_all_calculations() == 4
            assert await client.delete_calculation(9) == 9

    @pytest.mark.asyncio
    async def test_check_health(self):
        def healthy(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True})

        def unhealthy(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"success": False})

        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(healthy) as client:
            assert await client.check_health() is True
        async with _client(unhealthy) as client:
            assert await client.check_health() is False
        async with _client(unreachable) as client:
            assert await client.check_health() is False


class TestClientAgainstApp:
    """The client talking to the real app over an in-process transport."""

    @pytest.mark.asyncio
    async def test_save_list_and_clear(self, database, tmp_path):
        settings = Settings(
            _env_file=None,
            DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'unused.db'}",
            ENVIRONMENT="test",
            LOG_LEVEL="WARNING",
        )
        app = create_app(settings, database=database)
        client = CalculatorClient(
            base_url="http://testserver/api",
            transport=httpx.ASGITransport(app=app),
        )

        async with client:
            saved = await client.save_calculation(_calculation("6", "*", "7", "42"))
            fetched = await client.get_calculation(saved.id)
            listed = await client.get_calculations()

            with pytest.raises(ApiError) as exc_info:
                await client.save_calculation(_calculation("2", "+", "3", "6"))

            deleted = await client.delete_all_calculations()

            with pytest.raises(ApiError) as missing:
                await client.get_calculation(saved.id)

        assert fetched == saved
        assert [c.id for c in listed] == [saved.id]
        assert exc_info.value.status == 400
        assert deleted == 1
        assert missing.value.status == 404
