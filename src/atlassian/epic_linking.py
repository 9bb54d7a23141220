"""
Ordered fallback strategies.

Jira sites disagree on how a story is attached to an epic: team-managed and
newer company-managed projects take ``parent``, older ones only know the
"Epic Link" custom field, and some reject both. ``attempt_in_order`` runs
the candidates one after another and stops at the first success.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from src.core.exceptions import DocAutomationError
from src.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named attempt."""

    name: str
    attempt: Callable[[], Awaitable[T]]


async def attempt_in_order(strategies: Sequence[Strategy[T]]) -> T:
    """
    Run strategies in order and return the first successful result.

    Only service errors count as a failed attempt; anything else propagates
    at once.

    Raises:
        DocAutomationError: the error of the last strategy when all fail
        ValueError: no strategies given
    """
    if not strategies:
        raise ValueError("attempt_in_order needs at least one strategy")

    last_error: Optional[DocAutomationError] = None
    for strategy in strategies:
        try:
            result = await strategy.attempt()
        except DocAutomationError as e:
            logger.warning("Strategy failed", strategy=strategy.name, error=e.message)
            last_error = e
            continue
        logger.debug("Strategy succeeded", strategy=strategy.name)
        return result

    assert last_error is not None
    raise last_error
