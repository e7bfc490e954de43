"""
Lazy checkout steps.

Two ways a remote call becomes a LazyCoroResult: calls that already
answer with a Result are deferred as they are, calls that may raise go
through catching_async and get their exception mapped to an error value.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kungfu import LazyCoroResult, Result

from combinators.lift import catching_async


def deferred[T, E](
    fn: Callable[[], Awaitable[Result[T, E]]],
) -> LazyCoroResult[T, E]:
    """
    Nothing runs until the returned value is awaited.

        load = deferred(lambda: api.get_cart())
    """
    return LazyCoroResult(fn)


__all__ = (
    "catching_async",
    "deferred",
)
