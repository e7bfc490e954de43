"""
Checkout protocol — ordered remote steps with an abort check between them.

    load = ProtocolStep("fetch_cart", L.catching_async(...))
    chain = load.then(lambda cart: ProtocolStep("create_payment_intent", ...))

    match await run_protocol(chain, proceed=lambda: attempt_is_current()):
        case Ok(r): r.value
        case Error(f) if f.aborted: ...   # attempt was superseded, discard
        case Error(f): f.error, f.step

Steps run strictly in order; a step never starts before the previous one
resolved, and never starts once proceed() says the attempt is stale.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kungfu import Result, Ok, Error

from storefront._types import Lazy

# ═══════════════════════════════════════════════════════════════════════════════
# AST
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProtocolStep[T, E]:
    name: str
    action: Lazy[T, E]

    def then[U](self, f: Callable[[T], ProtocolStep[U, E]]) -> Then[T, U, E]:
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U, E]:
    """Sequential composition (monadic bind)."""

    inner: ProtocolStep[T, E] | Then[Any, T, E]
    f: Callable[[T], ProtocolStep[U, E]]

    def then[V](self, f: Callable[[U], ProtocolStep[V, E]]) -> Then[U, V, E]:
        return Then(self, f)


type ProtocolExpr[T, E] = ProtocolStep[T, E] | Then[Any, T, E]

# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProtocolResult[T]:
    value: T
    steps_executed: int


@dataclass(frozen=True, slots=True)
class ProtocolFailure[E]:
    """
    Where the protocol stopped.

    aborted=True means proceed() returned False before `step` started;
    error is None in that case.
    """

    step: str
    step_failed: int
    error: E | None = None
    aborted: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# run_protocol()
# ═══════════════════════════════════════════════════════════════════════════════


def _always() -> bool:
    return True


async def run_protocol[T, E](
    expr: ProtocolExpr[T, E],
    proceed: Callable[[], bool] = _always,
) -> Result[ProtocolResult[T], ProtocolFailure[E]]:
    steps = 0

    async def run(node: ProtocolExpr[Any, E]) -> Result[Any, ProtocolFailure[E]]:
        nonlocal steps
        match node:
            case ProtocolStep(name=name, action=action):
                if not proceed():
                    return Error(ProtocolFailure(step=name, step_failed=steps + 1, aborted=True))
                steps += 1
                match await action:
                    case Ok(value):
                        return Ok(value)
                    case Error(e):
                        return Error(ProtocolFailure(step=name, step_failed=steps, error=e))
            case Then(inner=inner, f=f):
                match await run(inner):
                    case Ok(value):
                        return await run(f(value))
                    case Error(failure):
                        return Error(failure)
        raise TypeError(f"Not a protocol expression: {node!r}")

    match await run(expr):
        case Ok(value):
            return Ok(ProtocolResult(value=value, steps_executed=steps))
        case Error(failure):
            return Error(failure)


__all__ = (
    "ProtocolStep",
    "Then",
    "ProtocolExpr",
    "ProtocolResult",
    "ProtocolFailure",
    "run_protocol",
)
