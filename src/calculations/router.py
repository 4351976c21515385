"""FastAPI router for calculation endpoints."""

import re
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query

from src.database import Database
from src.dependencies import get_database
from src.exceptions import (
    CalculationNotFoundError,
    InvalidCalculationError,
    InvalidCalculationIdError,
)

from .repository import (
    MAX_LIST_LIMIT,
    count_calculations,
    create_calculation,
    delete_all_calculations,
    delete_calculation,
    get_calculation,
    list_calculations,
)
from .schemas import (
    ApiResponse,
    CalculationCreate,
    CalculationListResponse,
    CalculationRead,
    DeleteAllResult,
    DeleteResult,
    ListMeta,
)
from .validator import verify_calculation

logger = structlog.get_logger("calculations")

router = APIRouter(prefix="/calculations", tags=["calculations"])

_ID_RE = re.compile(r"^-?\d+$")
# INTEGER primary key range
_MAX_ID = 2**31 - 1


def parse_calculation_id(raw_id: str) -> int:
    """Parse a path ID, rejecting anything that is not a plain integer.

    Raises:
        InvalidCalculationIdError: If the value is non-numeric or out of range.
    """
    raw_id = raw_id.strip()
    if not _ID_RE.match(raw_id):
        raise InvalidCalculationIdError(raw_id)
    calculation_id = int(raw_id)
    if abs(calculation_id) > _MAX_ID:
        raise InvalidCalculationIdError(raw_id)
    return calculation_id


@router.post("", response_model=ApiResponse[CalculationRead], status_code=201)
async def create_calculation_endpoint(
    calculation_create: CalculationCreate,
    database: Annotated[Database, Depends(get_database)],
) -> ApiResponse[CalculationRead]:
    """Verify and store a calculation.

    Shape validation happens while parsing the body; the arithmetic is then
    recomputed server-side before anything is written.

    Raises:
        InvalidCalculationError: If the submitted result does not match.
    """
    logger.info(
        "calculation_create_requested",
        operand1=str(calculation_create.operand1),
        operator=calculation_create.operator.value,
        operand2=str(calculation_create.operand2),
        result=str(calculation_create.result),
    )

    verification = verify_calculation(
        calculation_create.operand1,
        calculation_create.operator,
        calculation_create.operand2,
        calculation_create.result,
    )
    if not verification.valid:
        logger.warning("calculation_rejected", error=verification.error)
        raise InvalidCalculationError(verification.error)

    calculation = await create_calculation(database, calculation_create)
    logger.info("calculation_created", calculation_id=calculation.id)

    return ApiResponse[CalculationRead](
        message="Calculation created successfully",
        data=CalculationRead.model_validate(calculation),
    )


@router.get("", response_model=CalculationListResponse)
async def list_calculations_endpoint(
    database: Annotated[Database, Depends(get_database)],
    limit: Annotated[
        int, Query(ge=1, le=MAX_LIST_LIMIT, description="Max results")
    ] = MAX_LIST_LIMIT,
) -> CalculationListResponse:
    """List the most recent calculations, newest first."""
    calculations = await list_calculations(database, limit=limit)
    total = await count_calculations(database)

    return CalculationListResponse(
        message="Calculations retrieved successfully",
        data=[CalculationRead.model_validate(c) for c in calculations],
        meta=ListMeta(total=total, count=len(calculations)),
    )


@router.get("/{calculation_id}", response_model=ApiResponse[CalculationRead])
async def get_calculation_endpoint(
    calculation_id: str,
    database: Annotated[Database, Depends(get_database)],
) -> ApiResponse[CalculationRead]:
    """Get a single calculation.

    Raises:
        InvalidCalculationIdError: If the ID is not numeric.
        CalculationNotFoundError: If no calculation has this ID.
    """
    parsed_id = parse_calculation_id(calculation_id)
    calculation = await get_calculation(database, parsed_id)
    if calculation is None:
        raise CalculationNotFoundError(parsed_id)

    return ApiResponse[CalculationRead](
        message="Calculation retrieved successfully",
        data=CalculationRead.model_validate(calculation),
    )


@router.delete("", response_model=ApiResponse[DeleteAllResult])
async def delete_all_calculations_endpoint(
    database: Annotated[Database, Depends(get_database)],
) -> ApiResponse[DeleteAllResult]:
    """Delete every calculation. Succeeds on an empty table."""
    deleted_count = await delete_all_calculations(database)

    return ApiResponse[DeleteAllResult](
        message=f"Successfully deleted {deleted_count} calculations",
        data=DeleteAllResult(deleted_count=deleted_count),
    )


@router.delete("/{calculation_id}", response_model=ApiResponse[DeleteResult])
async def delete_calculation_endpoint(
    calculation_id: str,
    database: Annotated[Database, Depends(get_database)],
) -> ApiResponse[DeleteResult]:
    """Delete a single calculation.

    Raises:
        InvalidCalculationIdError: If the ID is not numeric.
        CalculationNotFoundError: If no calculation has this ID.
    """
    parsed_id = parse_calculation_id(calculation_id)
    deleted = await delete_calculation(database, parsed_id)
    if not deleted:
        raise CalculationNotFoundError(parsed_id)

    return ApiResponse[DeleteResult](
        message="Calculation deleted successfully",
        data=DeleteResult(id=parsed_id),
    )
