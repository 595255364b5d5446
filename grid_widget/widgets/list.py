from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..jqgrid import JqgridSupport
from ..services import GridQueryBuilder, parse_filters, serialize_filters
from .base import Event, Widget
from .filters import FILTER_OFF, FILTER_ON, FILTER_ONF

logger = logging.getLogger(__name__)


class GridListWidget(JqgridSupport, Widget):
    """The grid half of an edit widget: data, clicks and filters.

    Records are loaded after the page is up, when the grid asks for them
    with ``fetch_data``. Configuration lives on the parent edit widget.
    """

    template_name = "grid_widget/list/display.html"

    def after_add(self, parent: Widget) -> None:
        self.respond_to_event("fetch_data", from_=self.name)
        self.respond_to_event("cell_click", from_=self.name)
        self.respond_to_event("add_button", from_=self.name)

        parent.respond_to_event("reload_grid", from_=parent.name, on=self.name)

        parent.respond_to_event("display_form", from_=self.name)
        parent.respond_to_event("inplace_edit", from_=self.name)
        parent.respond_to_event("delete_record", from_=self.name)

    # configuration known by the parent
    @property
    def dom_id(self) -> str:
        return self.parent.dom_id

    @property
    def grid_options(self) -> Dict[str, Any]:
        return self.parent.grid_options

    @property
    def columns(self):
        return self.parent.columns

    @property
    def sortable_columns(self):
        return self.parent.sortable_columns

    @property
    def default_sort(self):
        return self.parent.default_sort

    @property
    def filters(self):
        return self.parent.filters

    @property
    def filter_sequence(self):
        return self.parent.filter_sequence

    @property
    def filter_default(self):
        return self.parent.filter_default

    @property
    def filters_widget(self) -> Optional[str]:
        return self.parent.filters_widget

    def display(self, evt: Optional[Event] = None) -> str:
        filters = self.find_widget(self.filters_widget) if self.filters_widget else None
        return self.render(
            list_id=f"{self.dom_id}_list",
            filters_html=filters.invoke("display") if filters is not None else "",
            grid_html=self.grid_place(),
        )

    def fetch_data(self, evt: Optional[Event] = None) -> Dict[str, Any]:
        """The current page of records as the grid's JSON envelope."""
        sort_index, sort_order = self.grid_get_sort(evt)
        page, rows = self.grid_get_pagination(evt)
        result = GridQueryBuilder(self.parent).fetch(
            sort_index=sort_index,
            sort_order=sort_order,
            active_filters=self.parse_filters(evt),
            pid=evt.get("pid"),
            page=page,
            rows=rows,
        )
        return self.grid_json(result)

    def reload_grid(self, evt: Optional[Event] = None) -> str:
        return self.grid_reload()

    def cell_click(self, evt: Optional[Event] = None) -> None:
        spec = self.grid_event_spec(evt)
        col = spec["col"]
        if not 0 <= col < len(self.columns):
            return None
        column = self.columns[col]
        if column.inplace_edit:
            self.trigger("inplace_edit", id=spec["id"], col=col)
        elif column.open_panel:
            self.trigger("display_form", id=spec["id"])
        # else it was just a select
        return None

    def add_button(self, evt: Optional[Event] = None) -> None:
        self.trigger("display_form", id=None, pid=evt.get("pid") if evt else None)

    def parse_filters(self, evt: Optional[Event] = None) -> Optional[Dict[str, List[str]]]:
        state = evt.get("filters") if evt else None
        return parse_filters(state, self.filters, self.filter_sequence, self.filter_default)

    def initial_filter_state(self) -> str:
        return serialize_filters(self.parse_filters(None))

    def set_filter(self, evt: Optional[Event] = None) -> str:
        """Highlight the active filters, store them with the grid and reload it."""
        active = self.parse_filters(evt) or {}
        logger.debug("filters for %s: %s", self.name, active)
        script = []
        for group_id in self.filter_sequence:
            selector = f"#{self.dom_id}_list .filter_{group_id}"
            add = FILTER_OFF if active.get(group_id) else FILTER_ONF
            remove = " ".join(c for c in (FILTER_ON, FILTER_OFF, FILTER_ONF) if c != add)
            script.append(f"$('{selector}').removeClass('{remove}').addClass('{add}');\n")
        for group_id, filter_ids in active.items():
            for filter_id in filter_ids:
                selector = f"#filter_{self.dom_id}_{group_id}_{filter_id}"
                script.append(
                    f"$('{selector}').addClass('{FILTER_ON}').removeClass('{FILTER_OFF} {FILTER_ONF}');\n"
                )
        script.append(self.grid_set_post_params({"filters": serialize_filters(active)}))
        script.append(self.grid_reload())
        return "".join(script)
