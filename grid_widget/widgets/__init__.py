from .base import Event, EventHandler, RootWidget, Widget
from .edit import GridEditWidget, resolve_model
from .filters import GridFiltersWidget
from .flash import GridFlashWidget
from .list import GridListWidget

__all__ = [
    "Event",
    "EventHandler",
    "GridEditWidget",
    "GridFiltersWidget",
    "GridFlashWidget",
    "GridListWidget",
    "RootWidget",
    "Widget",
    "resolve_model",
]
