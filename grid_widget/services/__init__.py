from .filters import parse_filters, serialize_filters, split_filter_state
from .history import find_version, history_manager, latest_version, revert_version
from .query import GridPage, GridQueryBuilder, apply_condition, apply_includes, apply_joins

__all__ = [
    "GridPage",
    "GridQueryBuilder",
    "apply_condition",
    "apply_includes",
    "apply_joins",
    "find_version",
    "history_manager",
    "latest_version",
    "parse_filters",
    "revert_version",
    "serialize_filters",
    "split_filter_state",
]
