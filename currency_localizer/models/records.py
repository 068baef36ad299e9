from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CURRENCY_CODE_PATTERN

if TYPE_CHECKING:  # pragma: no cover
    from currency_localizer.core.errors import CurrencyLocalizerError

Number = Union[int, float]


def _canonical(v: str) -> str:
    if not CURRENCY_CODE_PATTERN.match(v):
        raise ValueError("currency must be a canonical 3-letter uppercase code")
    return v


class LocationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency_code: str
    resolved_at: datetime
    country_code: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _canonical(v)


class RateRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_currency: str
    target_currency: str
    rate: float = Field(..., gt=0)
    resolved_at: datetime

    @field_validator("base_currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _canonical(v)


class ConversionStage(str, Enum):
    IDLE = "idle"
    VALIDATING_INPUT = "validating_input"
    RESOLVING_LOCATION = "resolving_location"
    RESOLVING_RATE = "resolving_rate"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionRequest:
    base_price: Number
    base_currency: str
    api_key: Optional[str]
    manual_currency: Optional[str] = None


@dataclass(frozen=True)
class ConversionResult:
    converted_price: float
    local_currency: str
    base_currency: str
    exchange_rate: float


@dataclass(frozen=True)
class ConversionOutcome:
    """Terminal value of one coordinator run: a result or a typed error."""

    stage: ConversionStage
    result: Optional[ConversionResult] = None
    error: Optional["CurrencyLocalizerError"] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, result: ConversionResult) -> "ConversionOutcome":
        return cls(stage=ConversionStage.SUCCEEDED, result=result)

    @classmethod
    def failure(cls, error: "CurrencyLocalizerError") -> "ConversionOutcome":
        return cls(stage=ConversionStage.FAILED, error=error)
