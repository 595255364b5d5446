"""Server-rendered grid/edit widgets for Django models, driven by jqGrid."""

from .apps import GridWidgetConfig
from .conf import settings

__all__ = ["settings", "GridWidgetConfig"]
