"""Display methods for grid cells, referenced by a column's ``custom`` option."""
from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Optional

from django.core.exceptions import ImproperlyConfigured
from django.utils.safestring import mark_safe


def abbrev(value: Any) -> str:
    """Cut long strings to 21 characters with an ellipsis."""
    if value is None:
        return ""
    text = str(value)
    return text[:21] + ("..." if len(text) > 21 else "")


def yn(value: Any) -> str:
    return "YES" if value else "No"


def check(value: Any) -> str:
    return mark_safe('<span class="ui-icon ui-icon-check"></span>') if value else ""


class DisplayRegistry:
    def __init__(self) -> None:
        self._methods: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str, func: Callable[..., Any]) -> None:
        self._methods[str(name)] = func

    def get(self, name: str) -> Optional[Callable[..., Any]]:
        return self._methods.get(str(name))

    def all(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._methods)


display_registry = DisplayRegistry()
display_registry.register("abbrev", abbrev)
display_registry.register("yn", yn)
display_registry.register("check", check)


class CustomDisplayMethods:
    """Predefined display methods, available to columns by name."""

    def custom_abbrev(self, value):
        return abbrev(value)

    def custom_yn(self, value):
        return yn(value)

    def custom_check(self, value):
        return check(value)

    def resolve_display_method(self, custom: Any) -> Callable[..., Any]:
        if callable(custom):
            return custom
        method = getattr(self, str(custom), None)
        if callable(method):
            return method
        method = display_registry.get(custom)
        if method is None:
            raise ImproperlyConfigured(f"Unknown display method '{custom}'")
        return method


def takes_record(func: Callable[..., Any]) -> bool:
    """True when ``func`` accepts a second positional argument (the record)."""
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        return True
    return len(positional) >= 2


def apply_display(func: Callable[..., Any], value: Any, record: Any) -> Any:
    if takes_record(func):
        return func(value, record)
    return func(value)
