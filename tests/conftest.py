# Test configuration
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from src.config import Settings  # noqa: E402
from src.database import Database  # noqa: E402
from src.main import create_app  # noqa: E402


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def database(tmp_path):
    """A Database handle with the calculations table created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'repository.db'}")
    await db.create_tables()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def client(test_settings):
    """TestClient running the full lifespan against SQLite."""
    app = create_app(test_settings)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
