"""Filter state carried between the browser and the list widget.

The state is a string of groups separated by ``|``, each group id followed
by its filter ids separated by ``-``::

    status-active|category-3-7|category-9

A filter id mentioned again toggles it: above, ``category`` ends up with
3, 7 and 9; had the last part been ``category-7``, 7 would be switched off.
An empty state, or one starting with ``|``, starts from the default filters.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..specs import FilterGroup

GROUP_SEPARATOR = "|"
ID_SEPARATOR = "-"


def split_filter_state(state: Optional[str]) -> List[Tuple[str, List[str]]]:
    passed: List[Tuple[str, List[str]]] = []
    for part in (state or "").split(GROUP_SEPARATOR):
        if not part:
            continue
        bits = part.split(ID_SEPARATOR)
        passed.append((bits[0], [b for b in bits[1:] if b]))
    return passed


def parse_filters(
    state: Optional[str],
    filters: Mapping[str, FilterGroup],
    filter_sequence: Sequence[str],
    filter_default: Mapping[str, Sequence[str]],
) -> Optional[Dict[str, List[str]]]:
    """Resolve a filter state string into ``{group: [active ids]}``.

    Unknown groups and ids are ignored. Returns ``None`` when no group is
    mentioned at all.
    """
    passed = split_filter_state(state)
    if not passed or (state or "").startswith(GROUP_SEPARATOR):
        defaults = [(group, list(ids)) for group, ids in filter_default.items()]
        passed = defaults + passed

    active: Dict[str, List[str]] = {}
    for group, filter_ids in passed:
        if group not in filter_sequence:
            continue
        fg = filters[group]
        current = active.setdefault(group, [])
        for filter_id in filter_ids:
            if filter_id not in fg.sequence:
                continue
            if fg.exclusive:
                current = [] if filter_id in current else [filter_id]
                active[group] = current
            elif filter_id in current:
                current.remove(filter_id)
            else:
                current.append(filter_id)
    return active or None


def serialize_filters(active: Optional[Mapping[str, Sequence[str]]]) -> str:
    """Inverse of :func:`split_filter_state` for a resolved filter dict."""
    parts = []
    for group, ids in (active or {}).items():
        parts.append(ID_SEPARATOR.join([group, *[str(i) for i in ids]]))
    return GROUP_SEPARATOR.join(parts)
