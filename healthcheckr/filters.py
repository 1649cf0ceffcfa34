# ============================================================================
# TAG FILTERING
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Include/exclude tag selection
# PURPOSE: Decide which registered checks take part in a query
# CREATED: 07 OCT 2026
# ============================================================================
"""
Tag Filtering

Rules, in order:
1. Untagged check: runs only when no include and no exclude filter is given
2. Exclude intersects the check's tags: skipped (exclude dominates)
3. Include given: runs only if it intersects the check's tags
4. Otherwise: runs

An empty include/exclude iterable means "no filter". Tags compare
case-sensitively.
"""

from typing import AbstractSet, FrozenSet, Iterable, Optional, Tuple, Union

TagsArg = Optional[Union[str, Iterable[str]]]


def registration_tags(tags: TagsArg) -> Optional[Tuple[str, ...]]:
    """
    Canonicalize tags given at registration time.

    A bare string is one tag. Order is kept, duplicates dropped, and an
    empty result becomes None.
    """
    if tags is None:
        return None
    if isinstance(tags, str):
        tags = (tags,)
    ordered = tuple(dict.fromkeys(tags))
    return ordered or None


def normalize_tags(tags: TagsArg) -> Optional[FrozenSet[str]]:
    """Turn a query-time filter into a set, or None when there is no filter."""
    if tags is None:
        return None
    if isinstance(tags, str):
        tags = (tags,)
    tag_set = frozenset(tags)
    return tag_set or None


def should_run(
    check_tags: Optional[Iterable[str]],
    include: Optional[AbstractSet[str]],
    exclude: Optional[AbstractSet[str]],
) -> bool:
    """Determine whether a check takes part given include/exclude filters."""
    if not check_tags:
        return include is None and exclude is None

    if exclude is not None and any(tag in exclude for tag in check_tags):
        return False

    if include is not None:
        return any(tag in include for tag in check_tags)

    return True


__all__ = [
    "registration_tags",
    "normalize_tags",
    "should_run",
]
