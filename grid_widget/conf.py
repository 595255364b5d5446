"""``GRID_WIDGET_*`` settings and their defaults.

Read them through ``grid_widget.conf.settings``. A project overrides any of
them in its own settings module; every other name is looked up on Django's
settings unchanged.
"""
from typing import Any, Mapping

from django.conf import settings as django_settings

__all__ = ["DEFAULTS", "settings"]

DEFAULTS = {
    # rowNum of a grid without a pager, -1 shows every row
    "GRID_WIDGET_ROWS": -1,
    "GRID_WIDGET_HEIGHT": 400,
    "GRID_WIDGET_PAGER_ROWS": 20,
    "GRID_WIDGET_DEL_CONFIRM": True,
    # "module:registrar" entries run at app ready
    "GRID_WIDGET_DISPLAY_MODULES": [],
    "GRID_WIDGET_FORM_TEMPLATE_DIR": "grid_widget/form",
    "GRID_WIDGET_SCRIPTS": [
        "https://code.jquery.com/jquery-3.7.1.min.js",
        "https://code.jquery.com/ui/1.13.2/jquery-ui.min.js",
        "https://cdn.jsdelivr.net/npm/free-jqgrid@4.15.5/js/jquery.jqgrid.min.js",
    ],
    "GRID_WIDGET_STYLESHEETS": [
        "https://code.jquery.com/ui/1.13.2/themes/base/jquery-ui.css",
        "https://cdn.jsdelivr.net/npm/free-jqgrid@4.15.5/css/ui.jqgrid.min.css",
    ],
}


class GridWidgetSettings:
    def __init__(self, defaults: Mapping[str, Any]) -> None:
        self._defaults = dict(defaults)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._defaults:
            return getattr(django_settings, name, self._defaults[name])
        return getattr(django_settings, name)


settings = GridWidgetSettings(DEFAULTS)
