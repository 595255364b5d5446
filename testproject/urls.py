from django.urls import path

from grid_widget.views import GridWidgetView

from .contacts.views import PeopleView, configure_categories

urlpatterns = [
    path("people/", PeopleView.as_view(), name="people"),
    path(
        "categories/",
        GridWidgetView.as_view(resource="contacts.Category", configure=configure_categories),
        name="categories",
    ),
]
