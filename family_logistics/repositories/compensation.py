"""
Compensating Rollback.

Neither engine offers transactions.  A caller that needs two writes to
succeed or fail together (a household and its owner membership, a trip
and its cloned packing list) runs them through
:func:`run_with_compensation`: if the second write fails, the first is
undone by an explicit corrective write and the second write's error is
returned.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse

T = TypeVar("T")


async def run_with_compensation(
    step: Callable[[], Awaitable[ApiResponse[T]]],
    follow_up: Callable[[T], Awaitable[ApiResponse[Any]]],
    rollback: Callable[[T], Awaitable[ApiResponse[Any]]],
    logger: StructuredLogger,
    label: str,
) -> ApiResponse[T]:
    """Run *step* then *follow_up*, undoing *step* if *follow_up* fails.

    Returns
    -------
    ApiResponse
        The step's error if the step failed; the follow-up's error if the
        follow-up failed (after *rollback* was awaited); otherwise the
        step's response.  A failing *rollback* is logged, never raised.
    """
    first = await step()
    if first.error is not None or first.data is None:
        return first

    second = await follow_up(first.data)
    if second.error is None:
        return first

    logger.warning(
        "%s: second step failed (%s), rolling back first step.",
        label,
        second.error.message,
    )
    try:
        undo = await rollback(first.data)
    except Exception as exc:
        logger.error("%s: compensating rollback raised: %s", label, exc, exc_info=True)
    else:
        if undo.error is not None:
            logger.error(
                "%s: compensating rollback failed: %s. Manual cleanup may be required.",
                label,
                undo.error.message,
            )
    return ApiResponse.failure(second.error)
