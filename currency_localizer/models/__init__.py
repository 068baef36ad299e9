"""Pydantic records and result types for the conversion pipeline."""

from .records import (
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    ConversionStage,
    LocationRecord,
    RateRecord,
)

__all__ = [
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResult",
    "ConversionStage",
    "LocationRecord",
    "RateRecord",
]
