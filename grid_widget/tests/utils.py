from django.test import RequestFactory

from grid_widget.controller import grid_edit_widget
from grid_widget.widgets import RootWidget
from testproject.contacts.models import Category, Contact, Person
from testproject.contacts.views import configure_people


def make_people():
    staff = Category.objects.create(name="Staff")
    guests = Category.objects.create(name="Guests")
    people = {
        "ada": Person.objects.create(first_name="Ada", last_name="Lovelace", category=staff),
        "alan": Person.objects.create(first_name="Alan", last_name="Turing", category=staff),
        "grace": Person.objects.create(first_name="Grace", last_name="Hopper", category=guests),
        "edsger": Person.objects.create(first_name="Edsger", last_name="Dijkstra"),
        "kurt": Person.objects.create(first_name="Kurt", last_name="Godel", active=False, category=guests),
    }
    Contact.objects.create(person=people["ada"], data="ada@example.com", primary=True)
    Contact.objects.create(person=people["ada"], kind="phone", data="555-0100")
    return {"staff": staff, "guests": guests, **people}


def build_root(path="/people/", method="get", data=None, configure=configure_people, resource="contacts.Person"):
    """A request's widget tree holding one configured edit widget."""
    request = getattr(RequestFactory(), method)(path, data or {})
    root = RootWidget(request=request)
    widget = root.add(grid_edit_widget(resource, configure))
    return root, widget
