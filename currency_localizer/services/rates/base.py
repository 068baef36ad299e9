from __future__ import annotations

"""Rate provider abstraction.

A provider performs one remote call per invocation and returns the full
rate table for the pivot currency: units of each quote currency per one
unit of the pivot. Errors are raised as the typed taxonomy.
"""
from abc import ABC, abstractmethod
from typing import Dict


class RateProvider(ABC):
    @abstractmethod
    async def fetch_rates(self, base_currency: str, api_key: str) -> Dict[str, float]:
        """Return {quote_currency: rate} for base_currency."""
        raise NotImplementedError
