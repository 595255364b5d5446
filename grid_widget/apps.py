from importlib import import_module

from django.apps import AppConfig

from grid_widget.conf import settings

from .display import display_registry


class GridWidgetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "grid_widget"
    verbose_name = "Grid Widget"

    def ready(self):
        # Application display methods: "module:registrar" or a bare module
        # that registers on import.
        for entry in getattr(settings, "GRID_WIDGET_DISPLAY_MODULES", []):
            try:
                module_path, callable_name = entry.split(":", 1)
            except ValueError:
                import_module(entry)
            else:
                module = import_module(module_path)
                registrar = getattr(module, callable_name)
                registrar(display_registry)
