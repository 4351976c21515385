"""Global dependencies for the application."""

from fastapi import Request

from .database import Database


async def get_database(request: Request) -> Database:
    """Dependency to get the application's database handle.

    The handle is created in main.py lifespan and shared across requests;
    repository functions check connections out of its pool per operation.

    Args:
        request: The FastAPI request object.

    Returns:
        The Database instance stored on app state.
    """
    return request.app.state.database
