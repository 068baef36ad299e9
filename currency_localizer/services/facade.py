from __future__ import annotations

"""Conversion facade consumed by rendering code.

Holds the latest inputs, re-runs the coordinator whenever one of them
changes, and exposes a flat state snapshot plus success/error callbacks.

Callbacks fire exactly once per completed cycle. A cycle superseded by new
inputs (or by ``close()``) is detached: it never touches state or fires
callbacks, while the shared lookup it was waiting on still completes and
fills the caches.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from currency_localizer.models import (
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    ConversionStage,
)
from .coordinator import RequestCoordinator

logger = logging.getLogger("currency_localizer.facade")

SuccessCallback = Callable[[ConversionResult], None]
# Receives the typed taxonomy, or the raw exception when a cycle crashes
ErrorCallback = Callable[[Exception], None]


@dataclass(frozen=True)
class ConversionState:
    converted_price: Optional[float] = None
    local_currency: Optional[str] = None
    base_currency: Optional[str] = None
    exchange_rate: Optional[float] = None
    is_loading: bool = False
    error: Optional[Exception] = None

    @classmethod
    def from_outcome(cls, outcome: ConversionOutcome) -> "ConversionState":
        if outcome.result is None:
            return cls(error=outcome.error)
        r = outcome.result
        return cls(
            converted_price=r.converted_price,
            local_currency=r.local_currency,
            base_currency=r.base_currency,
            exchange_rate=r.exchange_rate,
        )


class ConversionFacade:
    def __init__(
        self,
        coordinator: RequestCoordinator,
        *,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self._coordinator = coordinator
        self._on_success = on_success
        self._on_error = on_error
        self._state = ConversionState()
        self._stage = ConversionStage.IDLE
        self._request: Optional[ConversionRequest] = None
        self._task: Optional[asyncio.Task] = None
        self._cycle = 0
        self._closed = False

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def stage(self) -> ConversionStage:
        return self._stage

    def update(
        self,
        *,
        base_price: float,
        base_currency: str,
        api_key: Optional[str],
        manual_currency: Optional[str] = None,
    ) -> asyncio.Task:
        """Record inputs; start a new cycle if they differ from the last ones."""
        if self._closed:
            raise RuntimeError("facade is closed")
        request = ConversionRequest(
            base_price=base_price,
            base_currency=base_currency,
            api_key=api_key,
            manual_currency=manual_currency,
        )
        if self._task is not None and request == self._request:
            return self._task
        self._request = request
        return self._start()

    def refetch(self) -> asyncio.Task:
        """Run a new cycle with the current inputs, e.g. after a RateLimited error."""
        if self._closed:
            raise RuntimeError("facade is closed")
        if self._request is None:
            raise RuntimeError("no inputs to convert; call update() first")
        return self._start()

    async def wait(self) -> Optional[ConversionOutcome]:
        if self._task is None:
            return None
        return await self._task

    def close(self) -> None:
        """Detach from any running cycle; shared lookups keep running."""
        self._closed = True
        self._detach()

    def _start(self) -> asyncio.Task:
        self._detach()
        self._cycle += 1
        self._state = ConversionState(is_loading=True)
        self._task = asyncio.ensure_future(self._run(self._cycle, self._request))
        return self._task

    def _detach(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _is_current(self, cycle: int) -> bool:
        return cycle == self._cycle and not self._closed

    async def _run(self, cycle: int, request: ConversionRequest) -> ConversionOutcome:
        def observe(stage: ConversionStage) -> None:
            if self._is_current(cycle):
                self._stage = stage

        try:
            outcome = await self._coordinator.convert(request, observer=observe)
        except Exception as e:
            if self._is_current(cycle):
                logger.exception("conversion cycle failed unexpectedly")
                self._stage = ConversionStage.FAILED
                self._state = ConversionState(error=e)
                self._notify_error(e)
            raise
        if not self._is_current(cycle):
            return outcome
        self._state = ConversionState.from_outcome(outcome)
        self._notify(outcome)
        return outcome

    def _notify(self, outcome: ConversionOutcome) -> None:
        if outcome.error is not None:
            self._notify_error(outcome.error)
            return
        if self._on_success is None or outcome.result is None:
            return
        try:
            self._on_success(outcome.result)
        except Exception:
            logger.exception("conversion callback raised")

    def _notify_error(self, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("conversion callback raised")
