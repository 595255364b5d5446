from django.test import SimpleTestCase, TestCase

from grid_widget.config import ConfigMethods
from grid_widget.services import parse_filters, serialize_filters, split_filter_state
from grid_widget.widgets.filters import FILTER_OFF, FILTER_ON, FILTER_ONF

from .utils import build_root, make_people


class FilterConfig(ConfigMethods):
    def __init__(self):
        self.reset_config()
        self.add_filter_group("status", exclusive=True)
        self.add_filter("active", {"default": True})
        self.add_filter("inactive")
        self.add_filter_group("cat")
        for pk in (1, 2, 3):
            self.add_filter(pk)

    def parse(self, state):
        return parse_filters(state, self.filters, self.filter_sequence, self.filter_default)


class ParseFiltersTests(SimpleTestCase):
    def setUp(self):
        self.config = FilterConfig()

    def test_empty_state_uses_defaults(self):
        self.assertEqual(self.config.parse(None), {"status": ["active"]})
        self.assertEqual(self.config.parse(""), {"status": ["active"]})

    def test_no_state_and_no_defaults_is_none(self):
        self.config.filter_default = {}
        self.assertIsNone(self.config.parse(""))

    def test_explicit_state_skips_defaults(self):
        self.assertEqual(self.config.parse("cat-1"), {"cat": ["1"]})

    def test_leading_separator_starts_from_defaults(self):
        self.assertEqual(self.config.parse("|cat-2"), {"status": ["active"], "cat": ["2"]})

    def test_exclusive_group_holds_one_id(self):
        self.assertEqual(self.config.parse("|status-inactive"), {"status": ["inactive"]})
        self.assertEqual(self.config.parse("|status-active"), {"status": []})

    def test_repeated_ids_toggle(self):
        self.assertEqual(self.config.parse("cat-1-2|cat-3"), {"cat": ["1", "2", "3"]})
        self.assertEqual(self.config.parse("cat-1-2|cat-1"), {"cat": ["2"]})

    def test_unknown_groups_and_ids_are_ignored(self):
        self.assertEqual(self.config.parse("bogus-1|cat-9"), {"cat": []})


class FilterStateTests(SimpleTestCase):
    def test_split(self):
        self.assertEqual(split_filter_state("a-1||b"), [("a", ["1"]), ("b", [])])
        self.assertEqual(split_filter_state(None), [])

    def test_serialize(self):
        self.assertEqual(serialize_filters({"status": ["active"], "cat": ["1", "2"]}), "status-active|cat-1-2")
        self.assertEqual(serialize_filters(None), "")

    def test_serialized_state_parses_back(self):
        config = FilterConfig()
        active = config.parse("|cat-3-1")
        self.assertEqual(config.parse(serialize_filters(active)), active)


class FilterWidgetTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()

    def setUp(self):
        self.root, self.widget = build_root()
        self.list = self.root.find_widget("person_widget_list")
        self.filters = self.root.find_widget("person_widget_filters")

    def test_filter_groups_show_the_default_state(self):
        groups = {g["id"]: g for g in self.filters.filter_groups()}
        status = [f for row in groups["status"]["rows"] for f in row]
        self.assertEqual([(f["id"], f["css"]) for f in status], [("active", FILTER_ON), ("inactive", FILTER_OFF)])
        categories = [f for row in groups["categories"]["rows"] for f in row]
        self.assertEqual({f["css"] for f in categories}, {FILTER_ONF})
        self.assertEqual(categories[0]["dom_id"], f"filter_person_widget_categories_{self.data['guests'].pk}")

    def test_display(self):
        html = self.filters.display()
        self.assertIn('id="person_widget_filters"', html)
        self.assertIn("type=filter_selected", html)
        self.assertIn(">Inactive<", html)

    def test_no_filters_no_display(self):
        contacts_filters = self.root.find_widget("contact_widget_filters")
        self.assertEqual(contacts_filters.display(), "")

    def test_filter_selected_is_handled_by_the_list(self):
        guests = self.data["guests"]
        updates = self.root.process_event(self.filters, "filter_selected", {"filters": f"|categories-{guests.pk}"})
        self.assertEqual(len(updates), 1)
        js = updates[0]
        self.assertIn(f"$('#filter_person_widget_categories_{guests.pk}').addClass('{FILTER_ON}')", js)
        self.assertIn(f"$('#person_widget_list .filter_categories').removeClass", js)
        self.assertIn(f'gpd["filters"] = "status-active|categories-{guests.pk}";', js)
        self.assertIn("trigger('reloadGrid')", js)

    def test_set_filter_to_nothing(self):
        js = self.list.set_filter(None)
        self.assertIn(f"addClass('{FILTER_ONF}')", js)
        self.assertIn('gpd["filters"] = "status-active";', js)
