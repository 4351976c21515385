"""Pydantic schemas for calculations and the response envelope."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# NUMERIC(20, 10): ten integer digits, ten fractional digits
MAX_ABS_VALUE = Decimal(10) ** 10

T = TypeVar("T")

# Decimals travel as JSON numbers
JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class Operator(StrEnum):
    """Arithmetic operator of a calculation."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class CalculationCreate(BaseModel):
    """Schema for submitting a computed calculation."""
    operand1: Decimal = Field(
        ..., gt=-MAX_ABS_VALUE, lt=MAX_ABS_VALUE, description="Left operand"
    )
    operator: Operator = Field(..., description="One of +, -, *, /")
    operand2: Decimal = Field(
        ..., gt=-MAX_ABS_VALUE, lt=MAX_ABS_VALUE, description="Right operand"
    )
    result: Decimal = Field(
        ..., gt=-MAX_ABS_VALUE, lt=MAX_ABS_VALUE, description="Client-computed result"
    )


class CalculationRead(BaseModel):
    """Schema for reading a stored calculation."""
    id: int
    operand1: JsonDecimal
    operator: Operator
    operand2: JsonDecimal
    result: JsonDecimal
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope.

    Attributes:
        success: Whether the request succeeded.
        message: Human-readable outcome.
        data: Payload, or None on failure.
    """
    success: bool = True
    message: str
    data: Optional[T] = None


class ListMeta(BaseModel):
    """Counts attached to list responses.

    Attributes:
        total: Number of records in the store.
        count: Number of records returned (at most the list cap).
    """
    total: int
    count: int


class CalculationListResponse(ApiResponse[list[CalculationRead]]):
    """Envelope for the calculation listing."""
    meta: ListMeta


class DeleteAllResult(BaseModel):
    deleted_count: int = Field(..., alias="deletedCount")

    model_config = ConfigDict(populate_by_name=True)


class DeleteResult(BaseModel):
    id: int
