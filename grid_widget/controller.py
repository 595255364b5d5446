from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from django.http import Http404, HttpRequest, HttpResponse, JsonResponse

from .widgets import GridEditWidget, RootWidget, resolve_model

logger = logging.getLogger(__name__)

EVENT_SOURCE_PARAM = "source"
EVENT_TYPE_PARAM = "type"


def grid_edit_widget(
    resource: Any,
    configure: Optional[Callable[[GridEditWidget], Any]] = None,
    **options: Any,
) -> GridEditWidget:
    """Create an edit widget for ``resource`` and run its configure block.

    ``resource`` is ``"app_label.ModelName"`` or a model class. The widget id
    defaults to ``<model_name>_widget``; pass ``widget_id`` to choose another.
    Other options (``dom_id``, ``form_only``, ...) are kept on the widget.
    """
    widget_id = options.pop("widget_id", None) or f"{resolve_model(resource)._meta.model_name}_widget"
    widget = GridEditWidget(widget_id, resource, **options)
    if configure is not None:
        configure(widget)
    return widget


class GridWidgetMixin:
    """Class-based view mixin serving a widget tree.

    Override :meth:`has_widgets` to add widgets to the root. A request
    carrying ``source`` and ``type`` is an event for the widget named by
    ``source``; anything else is handled by the view as usual, with the tree
    in the template context as ``widget_root``.
    """

    root_widget_class = RootWidget

    def has_widgets(self, root: RootWidget) -> None:
        pass

    def grid_edit_widget(self, resource, configure=None, **options) -> GridEditWidget:
        return grid_edit_widget(resource, configure, **options)

    def get_widget_root(self) -> RootWidget:
        # built once per request
        root = getattr(self, "_widget_root", None)
        if root is None:
            root = self.root_widget_class(request=self.request)
            self.has_widgets(root)
            self._widget_root = root
        return root

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        source = request.GET.get(EVENT_SOURCE_PARAM) or request.POST.get(EVENT_SOURCE_PARAM)
        event_type = request.GET.get(EVENT_TYPE_PARAM) or request.POST.get(EVENT_TYPE_PARAM)
        if source and event_type:
            return self.process_widget_event(request, source, event_type)
        return super().dispatch(request, *args, **kwargs)

    def process_widget_event(self, request: HttpRequest, source: str, event_type: str) -> HttpResponse:
        root = self.get_widget_root()
        widget = root.find_widget(source)
        if widget is None:
            raise Http404(f"Unknown widget '{source}'")
        data = request.POST if request.method == "POST" else request.GET
        logger.debug("%s %s event from %s", request.method, event_type, source)
        updates = root.process_event(widget, event_type, data, request.FILES)
        return self.render_event_response(updates)

    def render_event_response(self, updates: List[Any]) -> HttpResponse:
        """JSON when a handler returned data, otherwise the collected JavaScript."""
        for update in updates:
            if isinstance(update, (dict, list)):
                return JsonResponse(update, safe=False)
        return HttpResponse("\n".join(str(u) for u in updates), content_type="text/javascript")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["widget_root"] = self.get_widget_root()
        return context
