from django.db.models import Q
from django.test import TestCase

from grid_widget.controller import grid_edit_widget
from grid_widget.services import GridQueryBuilder, apply_condition, apply_includes, apply_joins
from grid_widget.services.query import infer_related_paths
from testproject.contacts.models import Contact, Person

from .utils import make_people


def people_widget(**grid_options):
    def configure(w):
        w.grid_options = grid_options
        w.add_column("last_name", sortable=True)
        w.add_column("first_name", sortable=True)
        w.add_column("category.name", sortable=True)
        w.add_column("notes", sortable=("-first_name", "first_name"))
        w.add_filter_group("status", exclusive=True)
        w.add_filter("active", {"where": {"active": True}, "default": True})
        w.add_filter("inactive", {"where": {"active": False}})
        w.add_filter_group("cat", where=lambda ids: {"category_id__in": ids})
        w.add_filter("staff")
        w.add_filter_group("misc")
        w.add_filter("categorized", {"joins": "category"})
        w.add_filter("raw", {"where": "first_name LIKE 'A%%'"})

    return grid_edit_widget("contacts.Person", configure)


def last_names(page):
    return [p.last_name for p in page.records]


class SortTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()

    def setUp(self):
        self.builder = GridQueryBuilder(people_widget())

    def test_default_sort(self):
        page = self.builder.fetch()
        self.assertEqual(last_names(page), ["Dijkstra", "Godel", "Hopper", "Lovelace", "Turing"])

    def test_requested_sort_descending(self):
        page = self.builder.fetch(sort_index="first_name", sort_order="DESC")
        self.assertEqual([p.first_name for p in page.records], ["Kurt", "Grace", "Edsger", "Alan", "Ada"])

    def test_unknown_index_falls_back_to_default(self):
        page = self.builder.fetch(sort_index="nope", sort_order="DESC")
        self.assertEqual(last_names(page)[0], "Dijkstra")

    def test_sort_across_relation(self):
        page = self.builder.fetch(sort_index="category_name", sort_order="ASC")
        # ties on the category are broken by pk
        self.assertEqual(last_names(page), ["Dijkstra", "Hopper", "Godel", "Lovelace", "Turing"])

    def test_custom_sort_pair(self):
        asc = self.builder.fetch(sort_index="notes", sort_order="ASC")
        self.assertEqual(asc.records[0].first_name, "Kurt")
        desc = self.builder.fetch(sort_index="notes", sort_order="DESC")
        self.assertEqual(desc.records[0].first_name, "Ada")


class FilterTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()

    def setUp(self):
        self.widget = people_widget()
        self.builder = GridQueryBuilder(self.widget)

    def test_filter_where(self):
        page = self.builder.fetch(active_filters={"status": ["inactive"]})
        self.assertEqual(last_names(page), ["Godel"])

    def test_group_where_gets_active_ids(self):
        staff = self.data["staff"]
        self.widget.filters["cat"].where = lambda ids: {"category_id__in": [staff.pk]}
        page = self.builder.fetch(active_filters={"cat": ["staff"]})
        self.assertEqual(last_names(page), ["Lovelace", "Turing"])

    def test_group_where_skipped_without_ids(self):
        page = self.builder.fetch(active_filters={"cat": []})
        self.assertEqual(page.total_records, 5)

    def test_joins_require_relation(self):
        page = self.builder.fetch(active_filters={"misc": ["categorized"]})
        self.assertNotIn("Dijkstra", last_names(page))
        self.assertEqual(page.total_records, 4)

    def test_raw_sql_where(self):
        page = self.builder.fetch(active_filters={"misc": ["raw"]})
        self.assertEqual(sorted(p.first_name for p in page.records), ["Ada", "Alan"])

    def test_where_scope_from_parent_id(self):
        contacts = grid_edit_widget("contacts.Contact", lambda w: w.add_column("data", sortable=True))
        contacts.where = lambda pid: {"person_id": pid}
        builder = GridQueryBuilder(contacts)
        self.assertEqual(builder.fetch(pid=self.data["ada"].pk).total_records, 2)
        self.assertEqual(builder.fetch(pid=self.data["alan"].pk).total_records, 0)
        self.assertEqual(builder.fetch(pid=None).total_records, 2)


class PaginationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()

    def test_pages(self):
        builder = GridQueryBuilder(people_widget(pager={"rows": 2}))
        first = builder.fetch(page=1, rows=2)
        self.assertEqual((first.current_page, first.total_pages, first.total_records), (1, 3, 5))
        self.assertEqual(last_names(first), ["Dijkstra", "Godel"])
        last = builder.fetch(page=3, rows=2)
        self.assertEqual(last_names(last), ["Turing"])

    def test_page_below_one_is_first_page(self):
        builder = GridQueryBuilder(people_widget(pager=True))
        self.assertEqual(builder.fetch(page=0, rows=2).current_page, 1)

    def test_no_rows_means_everything(self):
        builder = GridQueryBuilder(people_widget(pager=True))
        page = builder.fetch(page=1, rows=0)
        self.assertEqual((page.total_pages, len(page.records)), (1, 5))

    def test_empty_result_has_one_page(self):
        builder = GridQueryBuilder(people_widget(pager=True))
        Person.objects.all().delete()
        page = builder.fetch(page=1, rows=10)
        self.assertEqual((page.current_page, page.total_pages, page.total_records), (1, 1, 0))

    def test_without_pager_everything_is_on_page_one(self):
        builder = GridQueryBuilder(people_widget())
        page = builder.fetch(page=3, rows=2)
        self.assertEqual((page.current_page, page.total_pages, page.total_records), (1, 1, 5))
        self.assertEqual(len(page.records), 5)


class QueryHelperTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.data = make_people()

    def test_apply_condition_forms(self):
        qs = Person.objects.all()
        self.assertEqual(apply_condition(qs, {"active": False}).count(), 1)
        self.assertEqual(apply_condition(qs, Q(first_name="Ada") | Q(first_name="Alan")).count(), 2)
        self.assertEqual(apply_condition(qs, "last_name = 'Hopper'").count(), 1)
        self.assertEqual(apply_condition(qs, None).count(), 5)
        with self.assertRaises(TypeError):
            apply_condition(qs, 42)

    def test_apply_joins(self):
        self.assertEqual(apply_joins(Person.objects.all(), ["category"]).count(), 4)
        self.assertEqual(apply_joins(Person.objects.all(), "contacts").distinct().count(), 1)

    def test_infer_related_paths(self):
        select, prefetch = infer_related_paths(Person, ["category", "contacts", "category.people"])
        self.assertEqual(select, {"category"})
        self.assertEqual(prefetch, {"contacts", "category__people"})
        select, prefetch = infer_related_paths(Contact, ["person.category"])
        self.assertEqual(select, {"person__category"})

    def test_apply_includes_avoids_queries(self):
        qs = apply_includes(Person.objects.order_by("pk"), ["category", "contacts"])
        records = list(qs)
        with self.assertNumQueries(0):
            names = [p.category.name if p.category else None for p in records]
            contact_counts = [len(p.contacts.all()) for p in records]
        self.assertEqual(names[0], "Staff")
        self.assertEqual(contact_counts[0], 2)
