"""Repository layer for calculation records.

Every function opens its own session on the injected ``Database``; the
``async with`` block returns the pooled connection on success and on every
error path.
"""

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import (
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from src.database import Database
from src.exceptions import DatabaseUnavailableError, PersistenceError

from .models import Calculation
from .schemas import CalculationCreate

logger = structlog.get_logger("calculations.repository")

# Hard cap on rows returned by a single listing
MAX_LIST_LIMIT = 1000

_STORE_ERRORS = (SQLAlchemyError, OSError)
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)


def _wrap_store_error(action: str, error: Exception) -> PersistenceError:
    """Log a store failure and convert it into a PersistenceError."""
    logger.error("calculation_store_error", action=action, error=str(error))
    if isinstance(error, _UNAVAILABLE_ERRORS):
        return DatabaseUnavailableError(f"Failed to {action}: database unavailable")
    return PersistenceError(f"Failed to {action}: {error}")


async def create_calculation(
    database: Database,
    calculation_create: CalculationCreate,
) -> Calculation:
    """Insert a calculation and read the stored row back.

    The insert and the read-back are separate statements; a delete landing
    between them makes the read-back come up empty, which is reported as a
    persistence failure.

    Args:
        database: Database handle.
        calculation_create: Verified calculation data.

    Returns:
        The stored Calculation with its assigned id and timestamp.

    Raises:
        PersistenceError: If no id is assigned, the row cannot be read back,
            or the store fails.
    """
    try:
        async with database.session() as db:
            calculation = Calculation(
                operand1=calculation_create.operand1,
                operator=calculation_create.operator,
                operand2=calculation_create.operand2,
                result=calculation_create.result,
            )
            db.add(calculation)
            await db.commit()

            calculation_id = calculation.id
            if not calculation_id:
                raise PersistenceError("Failed to create calculation: no ID returned")

            logger.info("calculation_inserted", calculation_id=calculation_id)

            result = await db.execute(
                select(Calculation)
                .where(Calculation.id == calculation_id)
                .execution_options(populate_existing=True)
            )
            created = result.scalar_one_or_none()
            if created is None:
                raise PersistenceError(
                    "Failed to create calculation: inserted row could not be read back"
                )
            return created
    except PersistenceError:
        logger.error("calculation_create_failed")
        raise
    except _STORE_ERRORS as e:
        raise _wrap_store_error("create calculation", e) from e


async def list_calculations(
    database: Database,
    limit: int = MAX_LIST_LIMIT,
) -> list[Calculation]:
    """Fetch the most recent calculations, newest first.

    Args:
        database: Database handle.
        limit: Maximum rows to return, clamped to 1..MAX_LIST_LIMIT.

    Returns:
        List of Calculation objects.
    """
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    stmt = (
        select(Calculation)
        .order_by(Calculation.timestamp.desc(), Calculation.id.desc())
        .limit(limit)
    )
    try:
        async with database.session() as db:
            result = await db.execute(stmt)
            calculations = list(result.scalars().all())
    except _STORE_ERRORS as e:
        raise _wrap_store_error("fetch calculations", e) from e

    logger.info("calculations_listed", count=len(calculations))
    return calculations


async def list_recent_calculations(database: Database, limit: int = 10) -> list[Calculation]:
    """Fetch the newest few calculations."""
    return await list_calculations(database, limit=limit)


async def get_calculation(database: Database, calculation_id: int) -> Calculation | None:
    """Get a calculation by ID.

    Args:
        database: Database handle.
        calculation_id: ID of the calculation.

    Returns:
        The Calculation or None if not found.
    """
    try:
        async with database.session() as db:
            result = await db.execute(
                select(Calculation).where(Calculation.id == calculation_id)
            )
            calculation = result.scalar_one_or_none()
    except _STORE_ERRORS as e:
        raise _wrap_store_error("fetch calculation", e) from e

    if calculation is None:
        logger.info("calculation_not_found", calculation_id=calculation_id)
    return calculation


async def count_calculations(database: Database) -> int:
    """Count all stored calculations, ignoring the listing cap."""
    try:
        async with database.session() as db:
            result = await db.execute(select(func.count(Calculation.id)))
            return result.scalar() or 0
    except _STORE_ERRORS as e:
        raise _wrap_store_error("count calculations", e) from e


async def delete_calculation(database: Database, calculation_id: int) -> bool:
    """Delete a calculation by ID.

    Args:
        database: Database handle.
        calculation_id: ID of the calculation to delete.

    Returns:
        True if a row was removed, False if none matched.
    """
    try:
        async with database.session() as db:
            result = await db.execute(
                delete(Calculation).where(Calculation.id == calculation_id)
            )
            await db.commit()
    except _STORE_ERRORS as e:
        raise _wrap_store_error("delete calculation", e) from e

    deleted = (result.rowcount or 0) > 0
    logger.info("calculation_delete", calculation_id=calculation_id, deleted=deleted)
    return deleted


async def delete_all_calculations(database: Database) -> int:
    """Delete every calculation.

    Returns:
        Number of deleted rows.
    """
    try:
        async with database.session() as db:
            result = await db.execute(delete(Calculation))
            await db.commit()
    except _STORE_ERRORS as e:
        raise _wrap_store_error("delete calculations", e) from e

    deleted_count = result.rowcount or 0
    logger.info("calculations_deleted", deleted_count=deleted_count)
    return deleted_count
