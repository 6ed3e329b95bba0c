"""SQLAlchemy ORM models."""
import uuid
from sqlalchemy import Column, String, Float, Integer, Text, Index
from backend.database import Base


class FormulaRow(Base):
    __tablename__ = "formulas"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    expression = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    variables_json = Column(Text, nullable=False, default="[]")


class ConstantRow(Base):
    __tablename__ = "constants"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    description = Column(Text, nullable=True)


class CalculationRow(Base):
    __tablename__ = "calculations"

    # Insertion sequence breaks timestamp ties when listing newest first
    seq = Column(Integer, nullable=False, default=0)
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    formula_id = Column(String, nullable=False)
    inputs = Column(Text, nullable=False)
    result = Column(Float, nullable=False)
    timestamp = Column(String, nullable=False)

    __table_args__ = (
        Index("ix_calculations_formula_id", "formula_id"),
        Index("ix_calculations_timestamp", "timestamp"),
    )
