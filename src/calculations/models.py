"""SQLAlchemy models for calculations."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Enum as SQLAlchemyEnum,
    Index,
    Integer,
    Numeric,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.database import Base
from .schemas import Operator


class Calculation(Base):
    """A stored calculation record.

    Rows are written once and never updated. The store assigns ``id`` and
    ``timestamp``; no validation happens at this layer.

    Attributes:
        id: Surrogate primary key.
        operand1: Left operand, NUMERIC(20, 10).
        operator: One of +, -, *, /.
        operand2: Right operand, NUMERIC(20, 10).
        result: Submitted result, NUMERIC(20, 10).
        timestamp: Creation time.
    """

    __tablename__ = "calculations"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    operand1: Mapped[Decimal] = mapped_column(
        Numeric(20, 10, asdecimal=True),
        nullable=False,
    )
    operator: Mapped[Operator] = mapped_column(
        SQLAlchemyEnum(
            Operator,
            name="calculation_operator_enum",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        index=True,
    )
    operand2: Mapped[Decimal] = mapped_column(
        Numeric(20, 10, asdecimal=True),
        nullable=False,
    )
    result: Mapped[Decimal] = mapped_column(
        Numeric(20, 10, asdecimal=True),
        nullable=False,
        index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Calculation id={self.id} "
            f"{self.operand1} {self.operator} {self.operand2} = {self.result}>"
        )


# Newest-first listing reads this index in order
Index("ix_calculations_timestamp_desc", Calculation.timestamp.desc())
