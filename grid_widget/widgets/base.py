"""Stateful, server-rendered widgets with an event bus.

A widget tree is built per request. Widgets render fragments through Django
templates and talk to each other through named events: an event starts at a
source widget and bubbles up to the root; every widget on the way whose
handlers match the event invokes the handler's *state* (a method name) on
the handler's *target* widget. Whatever a state returns is collected as a
page update and sent back to the browser.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional
from urllib.parse import urlencode

from django.core.exceptions import ImproperlyConfigured
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from ..utils import jquery_update

logger = logging.getLogger(__name__)


@dataclass
class Event:
    type: str
    source: "Widget"
    data: Mapping[str, Any] = field(default_factory=dict)
    files: Optional[Mapping[str, Any]] = None

    def get(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key) if self.data is not None else None
        return default if value is None else value

    def __getitem__(self, key: str) -> Any:
        return self.get(key)


@dataclass(frozen=True)
class EventHandler:
    type: str
    state: str
    target: str
    source: Optional[str] = None

    def matches(self, event: Event) -> bool:
        if event.type != self.type:
            return False
        return self.source is None or self.source == event.source.name


class Widget:
    """Base widget: a node in the tree with handlers and a display state."""

    template_name = ""

    def __init__(self, name: str, **options: Any) -> None:
        self.name = name
        self.options = options
        self.parent: Optional[Widget] = None
        self._children: Dict[str, Widget] = {}
        self._handlers: List[EventHandler] = []
        self.initialize()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    # ----- lifecycle hooks ----------------------------------------------------
    def initialize(self) -> None:
        """Called once the widget is constructed, before it joins a tree."""

    def after_add(self, parent: "Widget") -> None:
        """Called when the widget is attached to ``parent``."""

    # ----- tree ---------------------------------------------------------------
    def add(self, widget: "Widget") -> "Widget":
        widget.parent = self
        self._children[widget.name] = widget
        widget.after_add(self)
        return widget

    @property
    def children(self) -> List["Widget"]:
        return list(self._children.values())

    @property
    def root(self) -> "Widget":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator["Widget"]:
        yield self
        for child in self._children.values():
            yield from child.walk()

    def find_widget(self, name: str) -> Optional["Widget"]:
        for widget in self.walk():
            if widget.name == name:
                return widget
        return None

    @property
    def request(self):
        return getattr(self.root, "_request", None)

    # ----- events -------------------------------------------------------------
    def respond_to_event(
        self,
        event_type: str,
        *,
        with_: Optional[str] = None,
        on: Optional[str] = None,
        from_: Optional[str] = None,
    ) -> None:
        """Invoke state ``with_`` (default: the event type) on widget ``on``
        (default: this widget) when ``event_type`` reaches this widget,
        optionally only when it was fired by widget ``from_``.
        """
        handler = EventHandler(
            type=event_type,
            state=with_ or event_type,
            target=on or self.name,
            source=from_,
        )
        if handler not in self._handlers:
            self._handlers.append(handler)

    def trigger(self, event_type: str, **data: Any) -> None:
        self.fire(Event(type=event_type, source=self, data=data))

    def fire(self, event: Event) -> None:
        root = self.root
        node: Optional[Widget] = self
        while node is not None:
            for handler in list(node._handlers):
                if not handler.matches(event):
                    continue
                target = root.find_widget(handler.target)
                if target is None:
                    raise ImproperlyConfigured(
                        f"Widget '{node.name}' routes '{event.type}' to unknown widget '{handler.target}'"
                    )
                logger.debug("event %s from %s -> %s.%s", event.type, event.source.name, target.name, handler.state)
                result = target.invoke(handler.state, event)
                if result:
                    getattr(root, "page_updates", []).append(result)
            node = node.parent

    def invoke(self, state: str, event: Optional[Event] = None) -> Any:
        method = getattr(self, state, None)
        if not callable(method):
            raise ImproperlyConfigured(f"{type(self).__name__} has no state '{state}'")
        return method(event)

    # ----- rendering ----------------------------------------------------------
    def get_context_data(self, **kwargs: Any) -> Dict[str, Any]:
        context = {"widget": self}
        context.update(kwargs)
        return context

    def render(self, template_name: Optional[str] = None, **context: Any) -> str:
        template = template_name or self.template_name
        if not template:
            raise ImproperlyConfigured(f"{type(self).__name__} has no template_name")
        return mark_safe(render_to_string(template, self.get_context_data(**context), request=self.request))

    def update(self, selector: str, html: str) -> str:
        return jquery_update(selector, html)

    def display(self, evt: Optional[Event] = None) -> str:
        return self.render()

    def url_for_event(self, event_type: str, **params: Any) -> str:
        request = self.request
        path = request.path if request is not None else ""
        query = {"source": self.name, "type": event_type}
        query.update({k: v for k, v in params.items() if v is not None})
        return f"{path}?{urlencode(query)}"


class RootWidget(Widget):
    """Top of a request's widget tree; owns the request and the page updates."""

    def __init__(self, request=None, name: str = "root", **options: Any) -> None:
        self._request = request
        self.page_updates: List[Any] = []
        super().__init__(name, **options)

    def display(self, evt: Optional[Event] = None) -> str:
        return mark_safe("".join(str(child.invoke("display")) for child in self.children))

    def process_event(
        self,
        source: Widget,
        event_type: str,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> List[Any]:
        """Fire a browser event from ``source`` and return the page updates."""
        self.page_updates = []
        source.fire(Event(type=event_type, source=source, data=data or {}, files=files))
        return list(self.page_updates)
