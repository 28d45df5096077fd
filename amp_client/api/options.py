"""
List Options
============

Query parameters accepted by list endpoints (`/playbooks`,
`/playbooks/{id}/actors`).

    ListOptions(sort_by="id", descending=True, page=2, per_page=50)
        → {"sort": "-id", "page": "2", "per_page": "50"}

Sortable fields are `id`, `label` and `email`. Anything else in `filters`
is sent as-is and interpreted by the server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union

SORTABLE_FIELDS = frozenset({"id", "label", "email"})


@dataclass(frozen=True)
class ListOptions:
    """Sorting, pagination and filtering for a list request."""

    sort_by: Optional[str] = None
    descending: bool = False
    page: Optional[int] = None
    per_page: Optional[int] = None
    filters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.sort_by is not None and self.sort_by not in SORTABLE_FIELDS:
            raise ValueError(
                f"cannot sort by {self.sort_by!r}; expected one of {sorted(SORTABLE_FIELDS)}"
            )
        if self.page is not None and self.page < 1:
            raise ValueError("page must be >= 1")
        if self.per_page is not None and self.per_page < 1:
            raise ValueError("per_page must be >= 1")

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = dict(self.filters)
        if self.sort_by is not None:
            params["sort"] = f"-{self.sort_by}" if self.descending else self.sort_by
        if self.page is not None:
            params["page"] = str(self.page)
        if self.per_page is not None:
            params["per_page"] = str(self.per_page)
        return params


Options = Union[ListOptions, Mapping[str, str], None]


def to_query_params(options: Options) -> Optional[Dict[str, str]]:
    """Normalise façade `options` arguments into query parameters."""
    if options is None:
        return None
    if isinstance(options, ListOptions):
        return options.to_params()
    return {str(k): str(v) for k, v in options.items()}


__all__ = [
    "ListOptions",
    "Options",
    "SORTABLE_FIELDS",
    "to_query_params",
]
