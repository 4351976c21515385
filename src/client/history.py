"""Client-side calculation history backed by the API."""

import structlog

from src.calculations.schemas import CalculationCreate, CalculationRead
from .api import CalculatorClient
from .exceptions import ApiError

logger = structlog.get_logger("client.history")


class CalculationHistory:
    """Local copy of stored calculations plus connection state.

    Attributes:
        history: Stored calculations, newest first.
        is_loading: True until the first load finishes.
        error: Last user-facing error message, if any.
        is_online: Whether the last API interaction succeeded.
    """

    def __init__(self, client: CalculatorClient) -> None:
        self.client = client
        self.history: list[CalculationRead] = []
        self.is_loading = True
        self.error: str | None = None
        self.is_online = True

    async def check_backend_health(self) -> bool:
        healthy = await self.client.check_health()
        self.is_online = healthy
        if not healthy:
            self.error = "Backend server is not available."
        return healthy

    async def initialize(self) -> None:
        """Load history if the backend is reachable."""
        if await self.check_backend_health():
            await self.load()
        else:
            self.is_loading = False

    async def load(self) -> None:
        """Replace the local history with the server's listing.

        Failures are recorded in ``error`` and clear the local list; they
        are not re-raised.
        """
        self.is_loading = True
        self.error = None
        try:
            self.history = await self.client.get_calculations()
            self.is_online = True
        except ApiError as e:
            logger.error("history_load_failed", status=e.status, error=e.message)
            self.error = e.message
            self.is_online = False
            self.history = []
        finally:
            self.is_loading = False

    async def save(self, calculation: CalculationCreate) -> CalculationRead:
        """Persist a calculation and prepend it to the local history.

        Raises:
            ApiError: If the API rejects the calculation or is unreachable.
        """
        try:
            saved = await self.client.save_calculation(calculation)
        except ApiError as e:
            logger.error("history_save_failed", status=e.status, error=e.message)
            self.error = e.message
            self.is_online = False
            raise

        self.history.insert(0, saved)
        self.error = None
        self.is_online = True
        return saved

    async def remove(self, calculation_id: int) -> None:
        """Delete one calculation on the server and locally.

        Raises:
            ApiError: If the API call fails.
        """
        try:
            await self.client.delete_calculation(calculation_id)
        except ApiError as e:
            self.error = e.message
            if e.is_network_error:
                self.is_online = False
            raise

        self.history = [c for c in self.history if c.id != calculation_id]
        self.error = None

    async def clear(self) -> int:
        """Delete every calculation; the local list is emptied even on failure.

        Returns:
            Number of calculations deleted on the server.

        Raises:
            ApiError: If the API call fails.
        """
        self.error = None
        try:
            deleted_count = await self.client.delete_all_calculations()
        except ApiError as e:
            logger.error("history_clear_failed", status=e.status, error=e.message)
            self.error = e.message
            self.is_online = False
            self.history = []
            raise

        self.history = []
        logger.info("history_cleared", deleted_count=deleted_count)
        return deleted_count

    async def retry_connection(self) -> None:
        if await self.check_backend_health():
            await self.load()
