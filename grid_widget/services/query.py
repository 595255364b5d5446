from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from django.core.exceptions import FieldDoesNotExist
from django.db import models
from django.db.models import Q

from ..specs import Column
from ..utils import field_lookup

logger = logging.getLogger(__name__)


@dataclass
class GridPage:
    records: List[Any]
    current_page: int
    total_pages: int
    total_records: int


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def apply_condition(qs, condition: Any):
    """Narrow ``qs`` by a dict of lookups, a ``Q`` or a raw SQL WHERE fragment."""
    if condition is None:
        return qs
    if isinstance(condition, Q):
        return qs.filter(condition)
    if isinstance(condition, Mapping):
        return qs.filter(**condition)
    if isinstance(condition, str):
        return qs.extra(where=[condition])
    raise TypeError(f"Unsupported filter condition: {condition!r}")


def apply_joins(qs, joins: Any):
    """Require the related rows along each relation path to exist (an inner join)."""
    for path in _as_list(joins):
        qs = qs.filter(**{f"{field_lookup(path)}__isnull": False})
    return qs


def infer_related_paths(model: type[models.Model], paths: Iterable[str]) -> Tuple[set, set]:
    """Split relation paths into select_related and prefetch_related sets.

    Forward ForeignKey/OneToOne chains can be joined; anything crossing a
    many-valued relation has to be prefetched.
    """
    select_paths = set()
    prefetch_paths = set()
    for raw in paths:
        path = field_lookup(raw)
        current_model = model
        single_valued = True
        for part in path.split("__"):
            try:
                field = current_model._meta.get_field(part)
            except FieldDoesNotExist:
                single_valued = False
                break
            if not getattr(field, "is_relation", False):
                break
            if field.many_to_many or field.one_to_many:
                single_valued = False
            current_model = field.related_model
        (select_paths if single_valued else prefetch_paths).add(path)
    return select_paths, prefetch_paths


def apply_includes(qs, includes: Any):
    if not includes:
        return qs
    select_paths, prefetch_paths = infer_related_paths(qs.model, _as_list(includes))
    if select_paths:
        qs = qs.select_related(*sorted(select_paths))
    if prefetch_paths:
        qs = qs.prefetch_related(*sorted(prefetch_paths))
    return qs


class GridQueryBuilder:
    """Sorting, filtering and paging of a grid edit widget's resource."""

    def __init__(self, config):
        # config is the owning GridEditWidget
        self.config = config

    def get_queryset(self):
        return self.config.resource_model._default_manager.all()

    def sort_column(self, sort_index: Optional[str], sort_order: str) -> Tuple[Optional[Column], str]:
        config = self.config
        if sort_index in config.sortable_columns:
            return config.columns[config.sortable_columns[sort_index]], sort_order
        if config.default_sort:
            index, ascending = config.default_sort
            return config.columns[config.sortable_columns[index]], "ASC" if ascending else "DESC"
        return None, sort_order

    def use_sort(self, qs, sort_index: Optional[str], sort_order: str = "ASC"):
        column, sort_order = self.sort_column(sort_index, sort_order)
        if column is None:
            return qs
        descending = sort_order == "DESC"
        if column.sortable is True:
            lookup = field_lookup(column.field)
            ordering = [f"-{lookup}" if descending else lookup]
        else:
            # custom (asc, desc) pair
            ordering = _as_list(column.sortable[1 if descending else 0])
        return qs.order_by(*ordering, "pk")

    def use_filter(self, qs, active_filters: Optional[Mapping[str, Sequence[str]]]):
        for group_id, filter_ids in (active_filters or {}).items():
            group = self.config.filters[group_id]
            if group.where is not None and filter_ids:
                qs = apply_condition(qs, group.where(list(filter_ids)))
            qs = apply_joins(qs, group.joins)
            for filter_id in filter_ids:
                flt = group.filters[filter_id]
                qs = apply_condition(qs, flt.where)
                qs = apply_joins(qs, flt.joins)
        return qs

    def use_where(self, qs, pid: Any):
        where = self.config.where
        if where is None or pid in (None, ""):
            return qs
        return apply_condition(qs, where(pid))

    def use_pagination(self, qs, page: int, rows: int) -> GridPage:
        """Run the query, honouring the grid's pager when it has one."""
        if "pager" not in self.config.grid_options:
            records = list(qs)
            return GridPage(records=records, current_page=1, total_pages=1, total_records=len(records))
        page = max(page, 1)
        total = qs.count()
        if rows <= 0:
            rows = total
        total_pages = 1 if total == 0 else (total - 1) // rows + 1
        start = (page - 1) * rows
        records = list(qs[start:start + rows])
        logger.debug("page %s/%s of %s rows (%s per page)", page, total_pages, total, rows)
        return GridPage(records=records, current_page=page, total_pages=total_pages, total_records=total)

    def fetch(
        self,
        *,
        sort_index: Optional[str] = None,
        sort_order: str = "ASC",
        active_filters: Optional[Mapping[str, Sequence[str]]] = None,
        pid: Any = None,
        page: int = 1,
        rows: int = 0,
    ) -> GridPage:
        qs = self.get_queryset()
        qs = self.use_sort(qs, sort_index, sort_order)
        qs = self.use_filter(qs, active_filters)
        qs = apply_includes(qs, self.config.includes)
        qs = self.use_where(qs, pid)
        return self.use_pagination(qs, page, rows)
