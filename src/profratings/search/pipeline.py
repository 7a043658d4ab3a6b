"""
Search -> filter -> virtualize, as one call.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, Tuple

from ..core.config import Settings
from .filters import ProfessorFilters, apply_filters, available_departments
from .location_state import SearchState
from .professor_search import ProfessorT, professor_search
from .virtualizer import VirtualItem, WindowVirtualizer, row_height_px

logger = logging.getLogger(__name__)


@dataclass
class SearchPage(Generic[ProfessorT]):
    search_results: List[ProfessorT]
    filtered: List[ProfessorT]
    rows: List[Tuple[VirtualItem, ProfessorT]]
    total_size: float
    departments: List[str] = field(default_factory=list)

    @property
    def no_results(self) -> bool:
        return not self.search_results or not self.filtered


class SearchFilterPipeline:
    """Runs a professor query through search, filters and virtualization."""

    def __init__(
        self,
        name_threshold: float,
        row_height: float,
        overscan: int,
    ):
        self.name_threshold = name_threshold
        self.row_height = row_height
        self.overscan = overscan

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchFilterPipeline":
        return cls(
            name_threshold=settings.name_match_threshold,
            row_height=row_height_px(settings.card_height_rem, settings.root_font_size),
            overscan=settings.overscan,
        )

    def run(
        self,
        professors: Sequence[ProfessorT],
        search_state: SearchState,
        filters: Optional[ProfessorFilters] = None,
        scroll_offset: float = 0.0,
        viewport_height: float = 0.0,
    ) -> SearchPage[ProfessorT]:
        search_results = professor_search(
            professors,
            search_state.type,
            search_state.search_value,
            name_threshold=self.name_threshold,
        )
        filtered = apply_filters(search_results, filters)

        virtualizer = WindowVirtualizer(
            count=len(filtered), estimate_size=self.row_height, overscan=self.overscan
        )
        rows = [
            (item, filtered[item.index])
            for item in virtualizer.get_virtual_items(scroll_offset, viewport_height)
        ]

        logger.debug(
            f"Search {search_state.type.value}={search_state.search_value!r}: "
            f"{len(search_results)} matched, {len(filtered)} after filters, {len(rows)} rows laid out"
        )

        return SearchPage(
            search_results=search_results,
            filtered=filtered,
            rows=rows,
            total_size=virtualizer.get_total_size(),
            departments=available_departments(search_results),
        )
