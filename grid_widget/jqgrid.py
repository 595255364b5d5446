"""Everything jqGrid-specific lives here.

:class:`JqgridSupport` is mixed into the list widget. Supporting another grid
means providing the same methods:

* ``grid_json`` the table data in the shape the grid fetches.
* ``grid_reload`` JS making the grid re-request its data.
* ``grid_set_post_params`` JS storing values the grid sends with each fetch.
* ``grid_event_spec`` column and record id of a cell click.
* ``grid_get_sort`` requested sort index and order.
* ``grid_get_pagination`` requested page and page size.
* ``grid_place`` the grid's markup and initialization.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.utils.html import conditional_escape, escapejs

from grid_widget.conf import settings

from .display import apply_display
from .services.query import GridPage
from .utils import UNSET, resolve_path, to_int, to_js


class JqgridSupport:
    # ----- data ---------------------------------------------------------------
    def grid_json(self, page: GridPage) -> Dict[str, Any]:
        """The envelope jqGrid's JSON reader expects."""
        return {
            "total": page.total_pages,
            "page": page.current_page,
            "records": page.total_records,
            "rows": [{"id": record.pk, "cell": self.grid_json_row(record)} for record in page.records],
        }

    def grid_json_row(self, record) -> List[Any]:
        """One record's cells, with each column's display method applied."""
        edit = self.parent
        cells = []
        for column in self.columns:
            value = "" if column.virtual else resolve_path(record, column.field)
            if column.custom:
                if value is UNSET:
                    value = None
                value = apply_display(edit.resolve_display_method(column.custom), value, record)
            elif hasattr(value, "pk"):
                value = str(value)
            # cells are inserted as HTML; display methods mark their markup safe
            if isinstance(value, str):
                value = conditional_escape(value)
            cells.append(value)
        return cells

    # ----- request parsing ----------------------------------------------------
    def grid_event_spec(self, evt) -> Dict[str, Any]:
        return {"col": to_int(evt.get("col")), "id": evt.get("id"), "parms": evt.get("postData")}

    def grid_get_sort(self, evt) -> Tuple[Optional[str], str]:
        return evt.get("sidx") or None, "DESC" if evt.get("sord") == "desc" else "ASC"

    def grid_get_pagination(self, evt) -> Tuple[int, int]:
        return to_int(evt.get("page"), 1), to_int(evt.get("rows"))

    # ----- client side --------------------------------------------------------
    @property
    def grid_dom_id(self) -> str:
        return f"{self.dom_id}_grid"

    def grid_reload(self) -> str:
        """Redraw the grid (re-request the data) and reset its caption."""
        selector = escapejs(f"#{self.grid_dom_id}")
        return (
            f"$('{selector}').setCaption('{escapejs(self.parent.caption)}');\n"
            f"$('{selector}').trigger('reloadGrid');\n"
        )

    def grid_set_post_params(self, parms: Mapping[str, Any]) -> str:
        """Store ``parms`` in the grid's postData, leaving other keys alone."""
        selector = escapejs(f"#{self.grid_dom_id}")
        assignments = "".join(f"gpd[{to_js(str(k))}] = {to_js(v)};" for k, v in parms.items())
        return (
            "(function() {\n"
            f"  var gpd = $('{selector}').getGridParam('postData');\n"
            "  if (typeof gpd == 'undefined') gpd = {};\n"
            f"  {assignments}\n"
            f"  $('{selector}').setGridParam({{postData: gpd}});\n"
            "})();\n"
        )

    def grid_columns(self) -> List[Dict[str, Any]]:
        return [column.grid_model() for column in self.columns]

    def grid_post_data(self) -> Dict[str, Any]:
        post_data: Dict[str, Any] = {"filters": self.initial_filter_state()}
        edit = self.parent
        # a dependent grid sends the parent record's id along with each fetch
        owner = edit.parent
        if edit.where is not None and getattr(getattr(owner, "record", None), "pk", None):
            post_data["pid"] = owner.record.pk
        return post_data

    def grid_init_options(self) -> Dict[str, Any]:
        options = self.grid_options
        init: Dict[str, Any] = {
            "url": self.url_for_event("fetch_data"),
            "datatype": "json",
            "mtype": "GET",
            "colModel": self.grid_columns(),
            "hiddengrid": options.get("hiddengrid", False),
            "height": options.get("height") or settings.GRID_WIDGET_HEIGHT,
            "pager": f"#{self.grid_dom_id}_pager",
        }
        if "pager" in options:
            pager = options["pager"]
            init.update(
                pginput=True,
                pgbuttons=True,
                rowList=pager.get("rows_options", []),
                rowNum=pager.get("rows") or settings.GRID_WIDGET_PAGER_ROWS,
            )
        else:
            init.update(
                pginput=False,
                pgbuttons=False,
                rowList=[],
                rowNum=options.get("rows") or settings.GRID_WIDGET_ROWS,
            )
        if self.default_sort:
            index, ascending = self.default_sort
            init["sortname"] = self.columns[self.sortable_columns[index]].index
            init["sortorder"] = "asc" if ascending else "desc"
        init["postData"] = self.grid_post_data()
        init["viewrecords"] = True
        init["caption"] = self.parent.caption
        return init

    def grid_nav_options(self) -> Dict[str, Any]:
        options = self.grid_options
        return {
            "edit": False,
            "add": options.get("add_button", False),
            "del": options.get("del_button", False),
            "alertcap": "No record selected",
            "alerttext": "You must select a record first.<br />Press Esc to dismiss this warning.",
            "search": False,
            "refresh": False,
        }

    def grid_place(self) -> str:
        """Markup for the grid and its pager, wired to this widget's events."""
        options = self.grid_options
        return self.render(
            "grid_widget/jqgrid/place.html",
            grid_dom_id=self.grid_dom_id,
            init_options=to_js(self.grid_init_options()),
            nav_options=to_js(self.grid_nav_options()),
            cell_click_url=to_js(self.url_for_event("cell_click")),
            add_url=to_js(self.url_for_event("add_button")),
            delete_url=to_js(self.url_for_event("delete_record")),
            add_button=options.get("add_button", False),
            del_button=options.get("del_button", False),
            del_confirm=options.get("del_confirm", settings.GRID_WIDGET_DEL_CONFIRM),
        )
