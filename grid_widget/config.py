"""Builder methods for a grid's column and filter models.

Mixed into :class:`~grid_widget.widgets.edit.GridEditWidget` and meant to be
called from the widget's configure block::

    def configure(w):
        w.add_column("last_name", sortable=True, open_panel=True)
        w.add_column("active", toggle=True, custom="custom_check")
        w.add_filter_group("status", exclusive=True)
        w.add_filter("active", {"name": "Active", "where": {"active": True}, "default": True})
        w.add_filter("inactive", {"where": {"active": False}})
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from django.core.exceptions import ImproperlyConfigured

from .specs import Column, Filter, FilterGroup
from .utils import humanize


class ConfigMethods:
    columns: List[Column]
    sortable_columns: Dict[str, int]
    default_sort: Optional[Tuple[str, bool]]
    filters: Dict[str, FilterGroup]
    filter_sequence: List[str]
    filter_default: Dict[str, List[str]]

    def reset_config(self) -> None:
        self.columns = []
        self.sortable_columns = {}
        self.default_sort = None
        self.filters = {}
        self.filter_sequence = []
        self.filter_default = {}
        self._current_filter_group = None

    def add_column(self, field: str, **options: Any) -> Column:
        """Append a column to the grid's column model.

        ``field`` is a dotted attribute path evaluated against each record
        (``last_name``, ``person.last_name``). Options:

        * ``name`` unique grid identifier, defaults to ``field`` with dots
          replaced by underscores.
        * ``sortable`` True/False, or an ``(asc, desc)`` pair of custom
          ``order_by`` expressions. Defaults to False.
        * ``index`` sort key sent back by the grid, defaults to ``name``.
        * ``label`` header text, defaults to the humanized ``name``.
        * ``width`` defaults to 100.
        * ``search`` jqGrid search flag, defaults to False.
        * ``classes`` CSS classes for the column's cells.
        * ``custom`` display method: a callable, a widget method name or a
          registered display name. Two-argument callables also get the record.
        * ``open_panel`` a cell click opens the edit form.
        * ``inplace_edit`` a cell click edits in place; ``toggle`` implies it
          and flips a boolean.
        * ``virtual`` the column has no field to read.
        * ``default`` makes this the default sort, True ascending and False
          descending. Without one the first sortable column sorts ascending.

        Anything else is passed through to jqGrid's colModel.
        """
        options = dict(options)
        default = options.pop("default", None)
        name = options.pop("name", None) or field.replace(".", "_")
        sortable = options.pop("sortable", False)
        index = options.pop("index", None) or (name if sortable else None)
        toggle = bool(options.pop("toggle", False))
        inplace_edit = bool(options.pop("inplace_edit", False)) or toggle
        open_panel = bool(options.pop("open_panel", False))
        classes = options.pop("classes", None)
        if classes is None and (open_panel or inplace_edit):
            classes = " ".join(
                c
                for c in (
                    "column_opens_panel" if open_panel else None,
                    "column_inplace_edit" if inplace_edit else None,
                )
                if c
            )
        column = Column(
            field=field,
            name=name,
            label=options.pop("label", None) or humanize(name),
            width=options.pop("width", None) or 100,
            sortable=sortable,
            index=index,
            search=bool(options.pop("search", False)),
            classes=classes,
            custom=options.pop("custom", None),
            open_panel=open_panel,
            inplace_edit=inplace_edit,
            toggle=toggle,
            virtual=bool(options.pop("virtual", False)),
            spokesfield=options.pop("spokesfield", None),
            extra=options,
        )
        if column.is_sortable:
            if default is not None:
                self.default_sort = (column.index, bool(default))
            elif self.default_sort is None:
                self.default_sort = (column.index, True)
            self.sortable_columns[column.index] = len(self.columns)
        self.columns.append(column)
        return column

    def add_filter_group(
        self,
        id: str,
        configure: Optional[Callable[[Any], Any]] = None,
        **options: Any,
    ):
        """Start a filter group; subsequent :meth:`add_filter` calls land in it.

        ``where`` is called with the list of active filter ids of the group and
        may return a dict of lookups, a ``Q`` or a raw SQL string. ``joins``
        names relation paths that must exist. With ``exclusive`` only one
        filter of the group can be on at a time. ``columns`` sets how many
        filters the display puts in a row.
        """
        group_id = str(id)
        self.filters[group_id] = FilterGroup(
            id=group_id,
            name=options.get("name") or humanize(group_id),
            exclusive=bool(options.get("exclusive", False)),
            where=options.get("where"),
            joins=options.get("joins"),
            columns=options.get("columns"),
        )
        self.filter_sequence.append(group_id)
        self._current_filter_group = group_id
        if configure is not None:
            configure(self)
        return self

    def add_filter(self, id: Any, options: Union[str, Mapping[str, Any], None] = None, **kwargs: Any) -> Filter:
        """Add a filter to the current group.

        ``options`` may be the display name alone. Otherwise ``name``,
        ``where`` (dict, ``Q`` or raw SQL, composed with the group's),
        ``joins`` and ``default`` (active when no filter state is passed).
        """
        if self._current_filter_group is None:
            raise ImproperlyConfigured("add_filter() called before add_filter_group()")
        if isinstance(options, str):
            options = {"name": options}
        opts = {**dict(options or {}), **kwargs}
        filter_id = str(id)
        group = self.filters[self._current_filter_group]
        flt = Filter(
            id=filter_id,
            name=opts.get("name") or humanize(filter_id),
            where=opts.get("where"),
            joins=opts.get("joins"),
            default=bool(opts.get("default", False)),
        )
        group.filters[filter_id] = flt
        group.sequence.append(filter_id)
        if flt.default:
            self.filter_default.setdefault(group.id, []).append(filter_id)
        return flt
