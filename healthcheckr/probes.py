# ============================================================================
# PROBE ADAPTERS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Probe shape normalization
# PURPOSE: Adapt every supported probe shape to one cancellable callable
# CREATED: 07 OCT 2026
# ============================================================================
"""
Probe Adapters

Supported probe shapes, resolved once at registration:
- Capability object: anything with check_health(token) (see HealthCheck)
- Cancellable closure: fn(token) -> CheckOutcome
- Plain closure: fn() -> CheckOutcome (the token is ignored)

Each shape may be sync or async. Coroutine functions run on the event
loop; plain callables run in a worker thread so a blocking probe cannot
stall the checks running beside it. A probe may return a bare
HealthStatus instead of a CheckOutcome.

After adaptation the executor only ever sees:

    async def probe(token: CancellationToken) -> CheckOutcome
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable

from healthcheckr.cancellation import CancellationToken
from healthcheckr.core import CheckOutcome, HealthStatus
from healthcheckr.exceptions import InvalidArgumentError

Probe = Callable[[CancellationToken], Awaitable[CheckOutcome]]

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


def _is_async(func: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def _accepts_token(func: Callable[..., Any]) -> bool:
    """True if func can be called with one positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    return any(p.kind in _POSITIONAL for p in signature.parameters.values())


def coerce_outcome(result: Any) -> CheckOutcome:
    """Accept a CheckOutcome or a bare HealthStatus from a probe."""
    if isinstance(result, CheckOutcome):
        return result
    if isinstance(result, HealthStatus):
        return CheckOutcome(status=result)
    raise TypeError(
        f"Health check returned {type(result).__name__}, "
        f"expected CheckOutcome or HealthStatus"
    )


async def _invoke(func: Callable[..., Any], *args: Any) -> CheckOutcome:
    if _is_async(func):
        result = await func(*args)
    else:
        result = await asyncio.to_thread(func, *args)
        if inspect.isawaitable(result):
            result = await result
    return coerce_outcome(result)


class _ProbeAdapter:
    """Common base for adapted probes."""

    kind = "probe"
    __slots__ = ("target",)

    def __init__(self, target: Any):
        self.target = target

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.target!r}>"


class CapabilityProbe(_ProbeAdapter):
    """Wraps an object exposing check_health(token)."""

    kind = "capability"
    __slots__ = ()

    async def __call__(self, token: CancellationToken) -> CheckOutcome:
        return await _invoke(self.target.check_health, token)


class CancellableProbe(_ProbeAdapter):
    """Wraps a closure that takes the cancellation token."""

    kind = "cancellable"
    __slots__ = ()

    async def __call__(self, token: CancellationToken) -> CheckOutcome:
        return await _invoke(self.target, token)


class UncancellableProbe(_ProbeAdapter):
    """Wraps a closure that takes no arguments; the token is ignored."""

    kind = "uncancellable"
    __slots__ = ()

    async def __call__(self, token: CancellationToken) -> CheckOutcome:
        return await _invoke(self.target)


def normalize_probe(probe: Any) -> Probe:
    """
    Adapt a caller-supplied probe to the canonical shape.

    Raises:
        InvalidArgumentError: probe is None, a class, or not callable
    """
    if probe is None:
        raise InvalidArgumentError("probe must not be None", argument="probe")

    if isinstance(probe, _ProbeAdapter):
        return probe

    if isinstance(probe, type):
        raise InvalidArgumentError(
            f"probe must be an instance, got class {probe.__name__}",
            argument="probe",
        )

    if callable(getattr(probe, "check_health", None)):
        return CapabilityProbe(probe)

    if not callable(probe):
        raise InvalidArgumentError(
            f"probe must be callable or expose check_health(), got {type(probe).__name__}",
            argument="probe",
        )

    if _accepts_token(probe):
        return CancellableProbe(probe)
    return UncancellableProbe(probe)


__all__ = [
    "Probe",
    "CapabilityProbe",
    "CancellableProbe",
    "UncancellableProbe",
    "coerce_outcome",
    "normalize_probe",
]
