from django.contrib.auth.mixins import LoginRequiredMixin
from django.views.generic import TemplateView

from grid_widget.controller import GridWidgetMixin, grid_edit_widget

from .models import Category


def configure_categories(w):
    w.grid_options = {"title": "Categories", "add_button": True, "del_button": True}
    w.spokesfield = "name"
    w.add_column("name", sortable=True, open_panel=True)


def configure_contacts(w):
    w.grid_options = {"add_button": True, "del_button": True, "height": 120}
    w.form_fields = ["kind", "data", "primary"]
    w.add_column("kind", sortable=True, open_panel=True, width=60)
    w.add_column("data", sortable=True, open_panel=True, width=200)
    w.add_column("primary", toggle=True, custom="custom_check", width=50, align="center")


def configure_people(w):
    w.grid_options = {
        "title": "People",
        "pager": {"rows": 20, "rows_options": [10, 20, 50]},
        "add_button": True,
        "del_button": True,
    }
    w.includes = ["category"]
    w.spokesfield = "full_name"
    w.add_column("initials", virtual=True, custom="initials", width=30)
    w.add_column("last_name", sortable=True, open_panel=True)
    w.add_column("first_name", sortable=True, open_panel=True)
    w.add_column("category.name", label="Category", sortable=True)
    w.add_column("notes", custom="custom_abbrev", width=160)
    w.add_column("active", toggle=True, custom="custom_check", width=50, align="center")
    w.add_filter_group("status", exclusive=True)
    w.add_filter("active", {"name": "Active", "where": {"active": True}, "default": True})
    w.add_filter("inactive", {"name": "Inactive", "where": {"active": False}})
    w.add_filter_group("categories", where=lambda ids: {"category_id__in": ids}, columns=4)
    for category in Category.objects.order_by("name"):
        w.add_filter(category.pk, category.name)
    w.embed_widget(lambda pid: {"person_id": pid}, grid_edit_widget("contacts.Contact", configure_contacts))


class PeopleView(LoginRequiredMixin, GridWidgetMixin, TemplateView):
    template_name = "contacts/people.html"

    def has_widgets(self, root):
        root.add(self.grid_edit_widget("contacts.Person", configure_people))
