from django.contrib.auth.mixins import LoginRequiredMixin
from django.views.generic import TemplateView

from .controller import GridWidgetMixin


class GridWidgetView(LoginRequiredMixin, GridWidgetMixin, TemplateView):
    """A page showing one edit widget, configured from the URLconf.

    ::

        path("people/", GridWidgetView.as_view(resource="contacts.Person", configure=configure_people))
    """

    template_name = "grid_widget/page.html"
    resource = None
    configure = None
    widget_options = {}

    def has_widgets(self, root):
        root.add(self.grid_edit_widget(self.resource, self.configure, **self.widget_options))
