from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# Allowlist of grid options an edit widget accepts
ALLOWED_OPTIONS = {
    "title": str,
    "rows": int,
    "height": (int, str),  # pixels or e.g. '100%'
    "hiddengrid": bool,
    "pager": dict,  # {rows, rows_options}
    "add_button": bool,
    "del_button": bool,
    "del_confirm": bool,
}

PAGER_OPTIONS = {
    "rows": int,
    "rows_options": list,
}


def coerce_value(expected, value):
    if expected is int:
        if isinstance(value, bool):
            raise ValueError
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError
    if expected is str:
        return str(value)
    if expected is bool:
        if isinstance(value, bool):
            return value
        if str(value).lower() in {"1", "true", "yes", "on"}:
            return True
        if str(value).lower() in {"0", "false", "no", "off"}:
            return False
        raise ValueError
    if expected is list:
        if isinstance(value, (list, tuple)):
            return [coerce_value(int, v) for v in value]
        raise ValueError
    if expected is dict:
        # a bare True turns the pager on with its defaults
        if value is True:
            return {}
        if isinstance(value, Mapping):
            return _clean(PAGER_OPTIONS, value, "pager.")
        raise ValueError
    if isinstance(expected, tuple):  # union of types
        for t in expected:
            try:
                return coerce_value(t, value)
            except ValueError:
                continue
        raise ValueError
    return value


def _clean(allowed: Mapping[str, Any], source: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in source.items():
        if k not in allowed:
            logger.warning("Ignoring unknown grid option %s%s", prefix, k)
            continue
        if v is None:
            continue
        try:
            out[k] = coerce_value(allowed[k], v)
        except ValueError:
            logger.warning("Ignoring invalid value %r for grid option %s%s", v, prefix, k)
    return out


def clean_grid_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Allowlisted grid options with coerced values; anything else is dropped."""
    # pager=False means no pager at all
    source = {k: v for k, v in (options or {}).items() if not (k == "pager" and v is False)}
    return _clean(ALLOWED_OPTIONS, source)
