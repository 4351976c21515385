"""HTTP client for the Calculator API."""

from typing import Any

import httpx
import structlog

from src.calculations.schemas import CalculationCreate, CalculationRead
from src.config import get_settings
from .exceptions import ApiError

logger = structlog.get_logger("client")


def handle_response(response: httpx.Response) -> Any:
    """Unwrap a response envelope.

    Args:
        response: Response from the API.

    Returns:
        The envelope's ``data`` payload.

    Raises:
        ApiError: If the body is not JSON, the status is not 2xx, or the
            envelope reports ``success: false``.
    """
    status = response.status_code
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise ApiError(status, "Server returned non-JSON response")

    try:
        payload = response.json()
    except ValueError:
        raise ApiError(status, "Server returned non-JSON response")

    if not isinstance(payload, dict):
        raise ApiError(status, "Server returned an unexpected response")

    if not response.is_success:
        raise ApiError(status, payload.get("message") or f"HTTP {status}: Request failed")

    if not payload.get("success"):
        raise ApiError(status, payload.get("message") or "API request was not successful")

    return payload.get("data")


class CalculatorClient:
    """Async accessor for the calculations API.

    Network failures of any kind, timeouts included, surface as
    ``ApiError(0, ...)``; anything the server answered surfaces with its
    HTTP status.

    Attributes:
        base_url: API root, e.g. ``http://localhost:3006/api``.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root; defaults to CLIENT_API_URL.
            timeout: Request timeout; defaults to CLIENT_TIMEOUT_SECONDS.
            client: Shared httpx client to use instead of creating one.
            transport: Transport for a newly created client (tests).
        """
        settings = get_settings()
        self.base_url = (base_url or settings.CLIENT_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> "CalculatorClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        json: dict | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("api_request_timeout", method=method, url=url, timeout=self.timeout)
            raise ApiError(
                0, f"Network error: Unable to {action}. Please check your connection."
            ) from e
        except httpx.RequestError as e:
            logger.error("api_request_failed", method=method, url=url, error=str(e))
            raise ApiError(
                0, f"Network error: Unable to {action}. Please check your connection."
            ) from e

        return handle_response(response)

    async def save_calculation(self, calculation: CalculationCreate) -> CalculationRead:
        """Submit a calculation; returns the stored record."""
        payload = {
            "operand1": float(calculation.operand1),
            "operator": calculation.operator.value,
            "operand2": float(calculation.operand2),
            "result": float(calculation.result),
        }
        data = await self._request("POST", "/calculations", "save calculation", json=payload)
        return CalculationRead.model_validate(data)

    async def get_calculations(self) -> list[CalculationRead]:
        """Fetch the stored calculations, newest first."""
        data = await self._request("GET", "/calculations", "fetch calculations")
        return [CalculationRead.model_validate(item) for item in data or []]

    async def get_calculation(self, calculation_id: int) -> CalculationRead:
        data = await self._request(
            "GET", f"/calculations/{calculation_id}", "fetch calculation"
        )
        return CalculationRead.model_validate(data)

    async def delete_all_calculations(self) -> int:
        """Delete every calculation; returns the number deleted."""
        data = await self._request("DELETE", "/calculations", "delete calculations")
        return int(data["deletedCount"])

    async def delete_calculation(self, calculation_id: int) -> int:
        data = await self._request(
            "DELETE", f"/calculations/{calculation_id}", "delete calculation"
        )
        return int(data["id"])

    async def check_health(self) -> bool:
        """Return True if the API reports itself healthy. Never raises."""
        try:
            response = await self._client.get(
                f"{self.base_url}/health",
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            if response.is_success:
                payload = response.json()
                return isinstance(payload, dict) and payload.get("success") is True
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("health_check_error", error=str(e))
            return False
