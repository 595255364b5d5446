from __future__ import annotations

import json
import re
from typing import Any

from django.core.exceptions import ObjectDoesNotExist
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.html import escapejs
from django.utils.safestring import mark_safe
from django.utils.text import capfirst

# Same replacements json_script uses, so the output is safe inside <script>.
_JS_ESCAPES = {
    ord(">"): "\\u003E",
    ord("<"): "\\u003C",
    ord("&"): "\\u0026",
}

UNSET = "Unset"


def humanize(value: str) -> str:
    """Turn an identifier into a label: ``first_name`` -> ``First name``."""
    text = str(value or "")
    text = re.sub(r"_id$", "", text)
    text = text.replace("_", " ").strip()
    return capfirst(text.lower()) if text else ""


def to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_js(value: Any) -> str:
    """JSON-encode ``value`` for inline JavaScript."""
    return mark_safe(json.dumps(value, cls=DjangoJSONEncoder).translate(_JS_ESCAPES))


def jquery_update(selector: str, html: str) -> str:
    """JS replacing the content of ``selector`` with ``html``."""
    return f"$('{escapejs(selector)}').html('{escapejs(html)}');"


def field_lookup(path: str) -> str:
    """Dotted attribute path to an ORM lookup: ``person.last_name`` -> ``person__last_name``."""
    return str(path).replace(".", "__")


def resolve_path(obj: Any, path: str) -> Any:
    """Follow a dotted attribute path on ``obj``.

    Zero-argument methods along the way are called. Returns :data:`UNSET`
    when any step cannot be resolved.
    """
    current = obj
    for part in str(path).split("."):
        try:
            current = getattr(current, part)
        except (AttributeError, ObjectDoesNotExist):
            return UNSET
        if callable(current) and not isinstance(current, models.Manager):
            try:
                current = current()
            except TypeError:
                return UNSET
    return current


def resolve_owner(obj: Any, path: str) -> tuple[Any, str]:
    """Return the object owning the last attribute of ``path`` and that attribute's name.

    The owner is ``None`` when a relation along the way is empty.
    """
    parts = str(path).split(".")
    owner = obj
    for part in parts[:-1]:
        owner = getattr(owner, part)
        if owner is None:
            break
    return owner, parts[-1]
