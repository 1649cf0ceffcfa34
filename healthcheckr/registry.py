# ============================================================================
# HEALTH CHECK REGISTRY
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Check registration
# PURPOSE: Ordered, name-unique collection of registered checks
# CREATED: 07 OCT 2026
# ============================================================================
"""
Health Check Registry

Holds the checks registered on one HealthChecker, in registration order.

- Names are unique, compared case-insensitively
- Registrations are append-only (no update, no removal)
- The registration index restores original order after parallel runs

Usage:
    registry = HealthCheckRegistry()
    registry.register("postgres", PostgresCheck(pool), tags=["db"], timeout=5.0)

    # Get checks for execution
    checks = registry.select(include_tags=["db"])
"""

import copy
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from healthcheckr.exceptions import DuplicateNameError, InvalidArgumentError
from healthcheckr.filters import TagsArg, normalize_tags, registration_tags, should_run
from healthcheckr.logging import get_logger
from healthcheckr.probes import Probe, normalize_probe

logger = get_logger(__name__)

TimeoutArg = Optional[Union[float, int, timedelta]]


@dataclass(frozen=True)
class CheckRegistration:
    """
    Stored record binding a name to a normalized probe.

    Attributes:
        index: Insertion order, used to restore ordering after parallel runs
        name: Name as given at registration
        probe: Normalized probe (see healthcheckr.probes)
        tags: Tags in registration order, None when untagged
        timeout: Per-check timeout in seconds
        description: Static description, used when the outcome has none
        metadata: Static data merged under the outcome's data
    """
    index: int
    name: str
    probe: Probe
    tags: Optional[Tuple[str, ...]] = None
    timeout: Optional[float] = None
    description: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None


def _coerce_timeout(timeout: TimeoutArg) -> Optional[float]:
    if timeout is None:
        return None
    if isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        seconds = float(timeout)
    else:
        raise InvalidArgumentError(
            f"timeout must be seconds or a timedelta, got {type(timeout).__name__}",
            argument="timeout",
        )
    if seconds < 0:
        raise InvalidArgumentError("timeout must be non-negative", argument="timeout")
    return seconds


class HealthCheckRegistry:
    """
    Registry for health checks.

    Mutated only while checks are being registered; treated as read-only
    once queries start.
    """

    def __init__(self):
        self._checks: Dict[str, CheckRegistration] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.casefold()

    def register(
        self,
        name: str,
        probe: Any,
        *,
        tags: TagsArg = None,
        timeout: TimeoutArg = None,
        description: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> CheckRegistration:
        """
        Register a probe under a unique name.

        Args:
            name: Unique name (case-insensitive)
            probe: Capability object, cancellable closure or plain closure
            tags: Tags used for filtering
            timeout: Per-check timeout (seconds or timedelta)
            description: Static description for report entries
            metadata: Static data for report entries

        Returns:
            The stored registration

        Raises:
            InvalidArgumentError: Empty name, missing/unsupported probe,
                negative timeout
            DuplicateNameError: Name already registered
        """
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("name must be a non-empty string", argument="name")

        normalized = normalize_probe(probe)

        if self._key(name) in self._checks:
            raise DuplicateNameError(name)

        registration = CheckRegistration(
            index=len(self._checks),
            name=name,
            probe=normalized,
            tags=registration_tags(tags),
            timeout=_coerce_timeout(timeout),
            description=description,
            metadata=MappingProxyType(copy.deepcopy(dict(metadata))) if metadata else None,
        )
        self._checks[self._key(name)] = registration

        logger.debug(
            f"Registered health check: {name} "
            f"(kind={getattr(normalized, 'kind', 'probe')}, tags={registration.tags}, "
            f"timeout={registration.timeout})"
        )
        return registration

    def get(self, name: str) -> Optional[CheckRegistration]:
        """Get registration by name (case-insensitive)."""
        if not isinstance(name, str):
            return None
        return self._checks.get(self._key(name))

    def get_all(self) -> List[CheckRegistration]:
        """Get all registrations in registration order."""
        return list(self._checks.values())

    def names(self) -> List[str]:
        """Get registered names in registration order."""
        return [c.name for c in self._checks.values()]

    def select(
        self,
        include_tags: TagsArg = None,
        exclude_tags: TagsArg = None,
    ) -> List[CheckRegistration]:
        """Get registrations passing the tag filters, in registration order."""
        include = normalize_tags(include_tags)
        exclude = normalize_tags(exclude_tags)
        return [
            c for c in self._checks.values()
            if should_run(c.tags, include, exclude)
        ]

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._checks

    def __iter__(self) -> Iterator[CheckRegistration]:
        return iter(self.get_all())


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckRegistration",
    "HealthCheckRegistry",
]
