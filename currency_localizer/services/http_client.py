from __future__ import annotations

"""Lightweight async HTTP helper with retry.

Wraps httpx.AsyncClient for GET-JSON calls to the two providers. Connection
errors, timeouts and 5xx responses are retried with exponential backoff;
4xx responses (including 429) are returned to the caller immediately as
HttpError with the status, Retry-After hint and any JSON body attached so
providers can map them to typed errors.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("currency_localizer.http")


class HttpError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after
        self.payload = payload


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        # HTTP-date form is not worth supporting for these providers
        return None
    return seconds if seconds >= 0 else None


def _origin(url: str) -> str:
    # Paths may carry credentials (ExchangeRate-API puts the key there)
    parsed = httpx.URL(url)
    return f"{parsed.scheme}://{parsed.host}"


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 1,
    backoff: float = 0.5,
) -> Any:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            resp = await client.get(url, timeout=timeout)
        except httpx.HTTPError as e:  # transport errors and timeouts
            last_err = e
        else:
            if resp.status_code < 400:
                data = _json_or_none(resp)
                if data is None:
                    raise HttpError(
                        f"invalid JSON from {_origin(url)}", status_code=resp.status_code
                    )
                return data
            err = HttpError(
                f"HTTP {resp.status_code} from {_origin(url)}",
                status_code=resp.status_code,
                retry_after=parse_retry_after(resp.headers.get("Retry-After")),
                payload=_json_or_none(resp),
            )
            if resp.status_code < 500:
                raise err
            last_err = err
        if attempt == retries:
            break
        logger.debug("retrying after %s (attempt %d)", type(last_err).__name__, attempt + 1)
        await asyncio.sleep(backoff * (2**attempt))
    if isinstance(last_err, HttpError):
        raise last_err
    raise HttpError(
        f"Failed to fetch JSON from {_origin(url)}: {type(last_err).__name__}"
    ) from last_err
