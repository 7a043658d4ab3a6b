import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, TypeAdapter, ValidationError

from ...core.errors import ProfRatingsError
from ...dao.kv_dao import KVDAO
from ...models.schema import ProfessorListing
from ...search.filters import ProfessorFilters, SortingOption
from ...search.location_state import SearchState
from ...search.pipeline import SearchFilterPipeline
from ...search.professor_search import SearchType
from ..dependencies import get_dao, get_pipeline

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/search", tags=["Search"])

_listing_adapter = TypeAdapter(List[ProfessorListing])


# Response Models
class SearchRow(BaseModel):
    index: int
    start: float
    size: float
    professor: ProfessorListing


class SearchResponse(BaseModel):
    searchType: SearchType
    term: str
    totalMatched: int
    totalFiltered: int
    totalSize: float
    noResults: bool
    departments: List[str]
    rows: List[SearchRow]


@router.get(
    "/{search_type}",
    response_model=SearchResponse,
    summary="/search/{search_type}",
    description=(
        "Searches professors by name, class or department, applies filters and "
        "returns only the rows visible in the given viewport window."
    ),
)
async def search_professors(
    search_type: SearchType,
    term: str = "",
    departments: Optional[List[str]] = Query(default=None),
    min_num_evals: int = Query(default=0, ge=0),
    min_overall_rating: float = 0.0,
    max_overall_rating: float = 5.0,
    sort_by: SortingOption = SortingOption.RELEVANT,
    reverse: bool = False,
    scroll_offset: float = Query(default=0.0, ge=0),
    viewport_height: float = Query(default=1000.0, ge=0),
    dao: KVDAO = Depends(get_dao),
    pipeline: SearchFilterPipeline = Depends(get_pipeline),
):
    """
    Search professors

    **Query Parameters:**
    - `term`: Free-text term; empty returns every professor
    - `departments`: Repeatable department filter (e.g., `CSC`)
    - `min_num_evals`: Minimum number of evaluations
    - `sort_by`: relevant, alphabetical, overallRating, materialClear, studentDifficulties
    - `scroll_offset` / `viewport_height`: Window to lay out, in pixels
    """
    try:
        filters = ProfessorFilters(
            departments=set(departments) if departments else None,
            min_num_evals=min_num_evals,
            overall_rating=(min_overall_rating, max_overall_rating),
            sort_by=sort_by,
            reverse=reverse,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid filters: {e.errors()[0]['msg']}")

    try:
        raw_list = await dao.get_all_professors()
    except ProfRatingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        professors = _listing_adapter.validate_json(raw_list)
    except ValidationError as e:
        logger.error(f"Stored professor list is malformed: {e}")
        raise HTTPException(status_code=500, detail="Professor list is malformed")

    page = pipeline.run(
        professors,
        SearchState(type=search_type, search_value=term),
        filters,
        scroll_offset=scroll_offset,
        viewport_height=viewport_height,
    )

    return SearchResponse(
        searchType=search_type,
        term=term,
        totalMatched=len(page.search_results),
        totalFiltered=len(page.filtered),
        totalSize=page.total_size,
        noResults=page.no_results,
        departments=page.departments,
        rows=[
            SearchRow(index=item.index, start=item.start, size=item.size, professor=professor)
            for item, professor in page.rows
        ],
    )
