from django.contrib.auth import get_user_model
from django.test import TestCase

from testproject.contacts.models import Category, Person

from .utils import make_people


class WidgetViewTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()
        cls.user = get_user_model().objects.create_user(username="clerk", password="secret")

    def setUp(self):
        self.client.force_login(self.user)

    def event(self, source, event_type, method="get", **data):
        data.update(source=source, type=event_type)
        return getattr(self.client, method)("/people/", data)


class PageTests(WidgetViewTestCase):
    def test_people_page(self):
        response = self.client.get("/people/")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<table id="person_widget_grid"')
        self.assertContains(response, 'id="filter_person_widget_status_active"')
        self.assertContains(response, "grid_widget/grid_widget.css")
        # contacts only show once a person is picked
        self.assertContains(response, "grid_widget_orphan")

    def test_generic_view_page(self):
        response = self.client.get("/categories/")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<table id="category_widget_grid"')
        self.assertContains(response, "Categories")

    def test_login_required(self):
        self.client.logout()
        response = self.client.get("/people/")
        self.assertRedirects(response, "/login/?next=/people/", fetch_redirect_response=False)
        response = self.event("person_widget_list", "fetch_data")
        self.assertEqual(response.status_code, 302)

    def test_unknown_widget(self):
        self.assertEqual(self.event("nobody", "fetch_data").status_code, 404)


class EventTests(WidgetViewTestCase):
    def test_fetch_data_applies_default_filter(self):
        response = self.event("person_widget_list", "fetch_data", sidx="last_name", sord="asc", page="1", rows="20")
        self.assertEqual(response["Content-Type"], "application/json")
        result = response.json()
        self.assertEqual(result["records"], 4)
        self.assertEqual([row["cell"][1] for row in result["rows"]], ["Dijkstra", "Hopper", "Lovelace", "Turing"])

    def test_fetch_data_with_filters_and_paging(self):
        response = self.event(
            "person_widget_list", "fetch_data", filters="status-active", sidx="first_name", sord="desc", rows="2"
        )
        result = response.json()
        self.assertEqual((result["page"], result["total"], result["records"]), (1, 2, 4))
        self.assertEqual([row["cell"][2] for row in result["rows"]], ["Grace", "Edsger"])

    def test_category_filter(self):
        guests = self.data["guests"]
        response = self.event("person_widget_list", "fetch_data", filters=f"status-inactive|categories-{guests.pk}")
        self.assertEqual([row["cell"][1] for row in response.json()["rows"]], ["Godel"])

    def test_filter_selected(self):
        response = self.event("person_widget_filters", "filter_selected", filters="status-inactive")
        self.assertEqual(response["Content-Type"], "text/javascript")
        js = response.content.decode()
        self.assertIn("$('#filter_person_widget_status_inactive').addClass('filter_on')", js)
        self.assertIn('gpd["filters"] = "status-inactive";', js)
        self.assertIn("$('#person_widget_grid').trigger('reloadGrid');", js)

    def test_cell_click_opens_form(self):
        ada = self.data["ada"]
        response = self.event("person_widget_list", "cell_click", method="post", id=str(ada.pk), col="1")
        self.assertEqual(response["Content-Type"], "text/javascript")
        js = response.content.decode()
        self.assertIn("$('#person_widget_form').html(", js)
        self.assertIn("Lovelace", js)

    def test_form_submitted_creates_record(self):
        response = self.event(
            "person_widget",
            "form_submitted",
            method="post",
            id="",
            pid="",
            form_action="submit",
            **{
                "person_widget_form-first_name": "Barbara",
                "person_widget_form-last_name": "Liskov",
                "person_widget_form-notes": "",
                "person_widget_form-category": str(self.data["staff"].pk),
            },
        )
        person = Person.objects.get(last_name="Liskov")
        self.assertEqual(person.category, self.data["staff"])
        self.assertFalse(person.active)
        js = response.content.decode()
        self.assertIn("Barbara Liskov added.", js)
        self.assertIn("reloadGrid", js)

    def test_delete_record(self):
        kurt = self.data["kurt"]
        response = self.event("person_widget_list", "delete_record", method="post", id=str(kurt.pk))
        self.assertFalse(Person.objects.filter(pk=kurt.pk).exists())
        self.assertIn("Kurt Godel deleted.", response.content.decode())

    def test_undo_delete_through_revert_event(self):
        kurt = self.data["kurt"]
        self.event("person_widget_list", "delete_record", method="post", id=str(kurt.pk))
        version = Person.history.filter(id=kurt.pk).latest("history_date")
        self.assertEqual(version.history_type, "-")
        self.assertEqual(version.history_user, self.user)
        response = self.event(
            "person_widget", "revert", method="post", model="contacts.person", id=str(version.history_id)
        )
        self.assertEqual(response["Content-Type"], "text/javascript")
        self.assertTrue(Person.objects.filter(pk=kurt.pk).exists())
        self.assertIn("Last change undone for Kurt Godel.", response.content.decode())
        response = self.event("person_widget", "revert", method="post", model="auth.user", id=str(version.history_id))
        self.assertEqual(response.status_code, 404)

    def test_embedded_widget_events(self):
        ada = self.data["ada"]
        response = self.event("contact_widget_list", "fetch_data", pid=str(ada.pk))
        self.assertEqual(response.json()["records"], 2)
        response = self.event("contact_widget_list", "add_button", pid=str(ada.pk))
        js = response.content.decode()
        self.assertIn("$('#contact_widget_form').html(", js)
        self.assertIn("Add+Close", js)

    def test_generic_view_events(self):
        response = self.client.get("/categories/", {"source": "category_widget_list", "type": "fetch_data"})
        self.assertEqual([row["cell"][0] for row in response.json()["rows"]], ["Guests", "Staff"])
        Category.objects.create(name="Press")
        response = self.client.get("/categories/", {"source": "category_widget_list", "type": "fetch_data"})
        self.assertEqual(response.json()["records"], 3)
