"""Single-attempt, time-bounded collaborator calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from ...models.domain import Outcome

T = TypeVar("T")


async def attempt(call: Awaitable[T], timeout: float) -> Outcome[T]:
    """Await ``call`` once, capturing any failure or timeout in an Outcome.

    Cancellation is not captured: it propagates to the caller and the
    in-flight call is cancelled with it.
    """
    try:
        value = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        return Outcome.failure(TimeoutError(f"call did not complete within {timeout:.1f}s"))
    except Exception as exc:
        return Outcome.failure(exc)
    return Outcome.success(value)
