from __future__ import annotations

"""Geolocation provider abstraction.

A provider performs exactly one remote lookup per call and reports the
caller's currency as the provider spelled it; normalization and caching
belong to LocationResolver.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GeoLookup:
    currency: str
    country_code: Optional[str] = None


class GeolocationProvider(ABC):
    @abstractmethod
    async def lookup(self) -> GeoLookup:
        """Return the caller's currency; raise GeolocationFailure otherwise."""
        raise NotImplementedError
