from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..utils import to_js
from .base import Event, Widget

FILTER_ON = "filter_on"
FILTER_OFF = "filter_off"
# nothing in the group is selected, so the whole group is "on"
FILTER_ONF = "filter_onf"


def filter_css(group_active: List[str], filter_id: str) -> str:
    if not group_active:
        return FILTER_ONF
    return FILTER_ON if filter_id in group_active else FILTER_OFF


class GridFiltersWidget(Widget):
    """The clickable filter chips above a list widget's grid."""

    template_name = "grid_widget/filters/display.html"

    def after_add(self, parent: Widget) -> None:
        parent.respond_to_event("filter_selected", with_="set_filter", on=parent.name, from_=self.name)

    @property
    def edit(self):
        return self.parent.parent

    @property
    def dom_id(self) -> str:
        return self.edit.dom_id

    def filter_groups(self) -> List[Dict[str, Any]]:
        """Groups in display order, each with its filters laid out in rows."""
        active = self.parent.parse_filters(None) or {}
        groups = []
        for group_id in self.edit.filter_sequence:
            group = self.edit.filters[group_id]
            group_active = active.get(group_id, [])
            rows = [
                [
                    {
                        "id": flt.id,
                        "name": flt.name,
                        "dom_id": f"filter_{self.dom_id}_{group.id}_{flt.id}",
                        "css": filter_css(group_active, flt.id),
                    }
                    for flt in row
                ]
                for row in group.rows()
            ]
            groups.append({"id": group.id, "name": group.name, "rows": rows})
        return groups

    def display(self, evt: Optional[Event] = None) -> str:
        if not self.edit.filter_sequence:
            return ""
        return self.render(
            dom_id=self.dom_id,
            groups=self.filter_groups(),
            grid_selector=to_js(f"#{self.parent.grid_dom_id}"),
            filter_url=to_js(self.url_for_event("filter_selected")),
        )
