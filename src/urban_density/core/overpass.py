"""Overpass API fetching with ordered endpoint fallback.

Endpoints are tried strictly in order, one attempt each. A failed attempt
is followed by a ``backoff_base_s * (i + 1) ** 2`` second pause before
endpoint ``i + 1``. The first success wins; if every endpoint fails the
last failure is raised. Nothing is remembered between calls.

The retry loop is driven by ``FetchState``/``next_state`` so the
termination and delay contract can be tested without any I/O.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field

from urban_density.config import DEFAULT_ENDPOINTS
from .exceptions import DensityError, InvalidInputError, NetworkFailureError, UpstreamError

logger = logging.getLogger(__name__)

ATTEMPT_TIMEOUT_S = 25.0
BACKOFF_BASE_S = 0.150
USER_AGENT = "urban-density/0.1"


class FetchPhase(str, Enum):
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class FetchState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: FetchPhase = FetchPhase.ATTEMPTING
    index: int = Field(default=0, ge=0)
    endpoint_count: int = Field(gt=0)

    @property
    def terminal(self) -> bool:
        return self.phase in (FetchPhase.SUCCEEDED, FetchPhase.EXHAUSTED)


def next_state(state: FetchState, succeeded: Optional[bool] = None) -> FetchState:
    """Advance the fetch state machine by one step.

    ``succeeded`` is the outcome of the attempt and is required while
    ``ATTEMPTING``; it is ignored in ``BACKOFF``.
    """
    if state.phase == FetchPhase.ATTEMPTING:
        if succeeded is None:
            raise ValueError("An attempt outcome is required while attempting")
        if succeeded:
            return state.model_copy(update={"phase": FetchPhase.SUCCEEDED})
        if state.index + 1 < state.endpoint_count:
            return state.model_copy(update={"phase": FetchPhase.BACKOFF})
        return state.model_copy(update={"phase": FetchPhase.EXHAUSTED})
    if state.phase == FetchPhase.BACKOFF:
        return state.model_copy(update={"phase": FetchPhase.ATTEMPTING, "index": state.index + 1})
    raise ValueError(f"No transition out of terminal phase '{state.phase.value}'")


def backoff_delay_s(index: int, base_s: float = BACKOFF_BASE_S) -> float:
    """Pause after a failed attempt on endpoint ``index`` (0-based)."""
    return base_s * (index + 1) ** 2


async def _attempt(client: httpx.AsyncClient, endpoint: str, query: str, timeout_s: float) -> list[dict]:
    """One GET against one endpoint, cancelled at ``timeout_s``."""
    try:
        response = await asyncio.wait_for(
            client.get(endpoint, params={"data": query}),
            timeout=timeout_s,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise NetworkFailureError(
            f"Overpass endpoint {endpoint} timed out after {timeout_s:g}s", endpoint=endpoint
        ) from exc
    except httpx.TransportError as exc:
        raise NetworkFailureError(
            f"Overpass endpoint {endpoint} failed: {exc}", endpoint=endpoint
        ) from exc
    except httpx.RequestError as exc:
        # DecodingError, TooManyRedirects: the endpoint answered with something unusable
        raise UpstreamError(
            f"Overpass endpoint {endpoint} returned an unreadable response: {exc}", endpoint=endpoint
        ) from exc

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise UpstreamError(
            f"Overpass endpoint {endpoint} returned HTTP {status}",
            endpoint=endpoint, status_code=status,
        ) from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise UpstreamError(
            f"Overpass endpoint {endpoint} returned malformed JSON", endpoint=endpoint
        ) from exc

    elements = payload.get("elements") if isinstance(payload, dict) else None
    if not isinstance(elements, list):
        raise UpstreamError(
            f"Overpass endpoint {endpoint} response has no 'elements' list", endpoint=endpoint
        )
    remark = payload.get("remark")
    if isinstance(remark, str) and remark.strip().startswith("runtime error"):
        # Overpass reports aborted queries in-band with a 200 and no or partial elements
        raise UpstreamError(
            f"Overpass endpoint {endpoint} could not finish the query: {remark.strip()}", endpoint=endpoint
        )
    if remark:
        logger.warning("Overpass endpoint %s remark: %s", endpoint, payload["remark"])
    return elements


async def fetch_elements(
    query: str,
    endpoints: Sequence[str] = DEFAULT_ENDPOINTS,
    *,
    timeout_s: float = ATTEMPT_TIMEOUT_S,
    backoff_base_s: float = BACKOFF_BASE_S,
) -> list[dict]:
    """Run an Overpass query, falling back across ``endpoints`` in order.

    Returns:
        The raw ``elements`` list of the first successful response.

    Raises:
        InvalidInputError: if ``endpoints`` is empty.
        NetworkFailureError | UpstreamError: the last endpoint's failure
            when every endpoint failed.
    """
    endpoints = list(endpoints)
    if not endpoints:
        raise InvalidInputError("At least one Overpass endpoint is required")

    state = FetchState(endpoint_count=len(endpoints))
    last_error: Optional[DensityError] = None
    elements: list[dict] = []

    async with httpx.AsyncClient(timeout=timeout_s, headers={"User-Agent": USER_AGENT}) as client:
        while not state.terminal:
            if state.phase == FetchPhase.BACKOFF:
                await asyncio.sleep(backoff_delay_s(state.index, backoff_base_s))
                state = next_state(state)
                continue

            endpoint = endpoints[state.index]
            try:
                elements = await _attempt(client, endpoint, query, timeout_s)
            except (NetworkFailureError, UpstreamError) as exc:
                last_error = exc
                logger.warning(
                    "Overpass attempt %d/%d failed: %s", state.index + 1, len(endpoints), exc.message
                )
                state = next_state(state, succeeded=False)
            else:
                state = next_state(state, succeeded=True)

    if state.phase == FetchPhase.EXHAUSTED:
        logger.warning("All %d Overpass endpoints failed; last error: %s", len(endpoints), last_error)
        raise last_error

    logger.debug("Overpass endpoint %s returned %d elements", endpoints[state.index], len(elements))
    return elements
