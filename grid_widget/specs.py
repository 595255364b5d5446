from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

# Keys that drive server-side behaviour and never reach the grid's colModel.
LOCAL_COLUMN_KEYS = {
    "field",
    "custom",
    "open_panel",
    "inplace_edit",
    "toggle",
    "spokesfield",
    "virtual",
    "default",
}

# Either plain True/False, or an (ascending, descending) pair of order_by
# expressions (strings, expressions or sequences of them).
Sortable = Union[bool, Sequence[Any]]


@dataclass
class Column:
    field: str
    name: str
    label: str
    width: int = 100
    sortable: Sortable = False
    index: Optional[str] = None
    search: bool = False
    classes: Optional[str] = None
    custom: Any = None
    open_panel: bool = False
    inplace_edit: bool = False
    toggle: bool = False
    virtual: bool = False
    spokesfield: Optional[str] = None
    # Any other jqGrid colModel option (align, hidden, formatter, ...)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_sortable(self) -> bool:
        return bool(self.sortable)

    def grid_model(self) -> Dict[str, Any]:
        """Column options in the shape jqGrid's colModel expects."""
        out: Dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "width": self.width,
            "sortable": self.is_sortable,
            "search": self.search,
        }
        if self.index:
            out["index"] = self.index
        if self.classes:
            out["classes"] = self.classes
        for key, value in self.extra.items():
            if key not in LOCAL_COLUMN_KEYS:
                out[key] = value
        return out


@dataclass
class Filter:
    id: str
    name: str
    # dict of lookups, Q object or raw SQL string
    where: Any = None
    # relation path(s) that must exist for the row to match
    joins: Any = None
    default: bool = False


@dataclass
class FilterGroup:
    id: str
    name: str
    exclusive: bool = False
    # called with the list of active filter ids
    where: Optional[Callable[[List[str]], Any]] = None
    joins: Any = None
    columns: Optional[int] = None
    sequence: List[str] = field(default_factory=list)
    filters: Dict[str, Filter] = field(default_factory=dict)

    def rows(self) -> List[List[Filter]]:
        """Filters laid out ``columns`` per row (one row when unset)."""
        items = [self.filters[fid] for fid in self.sequence]
        width = self.columns or len(items) or 1
        return [items[i:i + width] for i in range(0, len(items), width)]
