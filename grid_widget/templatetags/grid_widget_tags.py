from django import template
from django.core.exceptions import ImproperlyConfigured

from grid_widget.conf import settings

register = template.Library()


def _widget_root(context):
    root = context.get("widget_root")
    if root is None and context.get("widget") is not None:
        root = context["widget"].root
    if root is None:
        raise ImproperlyConfigured(
            "Template context has no 'widget_root'; render it from a view using GridWidgetMixin."
        )
    return root


@register.simple_tag(takes_context=True)
def render_widget(context, name):
    """Render the named widget of the current widget tree, e.g. ``{% render_widget "person_widget" %}``."""
    widget = _widget_root(context).find_widget(name)
    if widget is None:
        raise ImproperlyConfigured(f"No widget named '{name}'")
    return widget.invoke("display")


@register.simple_tag
def url_for_event(widget, event_type, **params):
    return widget.url_for_event(event_type, **params)


@register.inclusion_tag("grid_widget/assets.html")
def grid_widget_assets():
    """Script and stylesheet tags the widgets need (jQuery, jQuery UI, jqGrid)."""
    return {
        "scripts": settings.GRID_WIDGET_SCRIPTS,
        "stylesheets": settings.GRID_WIDGET_STYLESHEETS,
    }
