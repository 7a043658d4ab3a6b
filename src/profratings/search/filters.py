"""
Category filters applied to search results.
"""

from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.schema import RATING_MAX, RATING_MIN
from .professor_search import ProfessorT

RatingRange = Tuple[float, float]


class SortingOption(str, Enum):
    RELEVANT = "relevant"
    ALPHABETICAL = "alphabetical"
    OVERALL_RATING = "overallRating"
    MATERIAL_CLEAR = "materialClear"
    STUDENT_DIFFICULTIES = "studentDifficulties"


class ProfessorFilters(BaseModel):
    """Filter and ordering choices for a list of professors"""

    departments: Optional[Set[str]] = None
    min_num_evals: int = Field(alias="minNumEvals", default=0, ge=0)
    overall_rating: RatingRange = Field(
        alias="overallRating", default=(RATING_MIN, RATING_MAX)
    )
    material_clear: RatingRange = Field(
        alias="materialClear", default=(RATING_MIN, RATING_MAX)
    )
    student_difficulties: RatingRange = Field(
        alias="studentDifficulties", default=(RATING_MIN, RATING_MAX)
    )
    sort_by: SortingOption = Field(alias="sortBy", default=SortingOption.RELEVANT)
    reverse: bool = False

    @model_validator(mode="after")
    def check_ranges(self):
        for name in ("overall_rating", "material_clear", "student_difficulties"):
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} range is inverted: {low} > {high}")
        if self.departments is not None:
            self.departments = {department.upper() for department in self.departments}
        return self

    model_config = ConfigDict(populate_by_name=True)


def available_departments(professors: Sequence[ProfessorT]) -> List[str]:
    """Sorted departments present in the list, offered as filter choices."""
    return sorted({professor.department for professor in professors})


def _in_range(value: float, bounds: RatingRange) -> bool:
    low, high = bounds
    return low <= value <= high


def _matches(professor: ProfessorT, filters: ProfessorFilters) -> bool:
    if filters.departments is not None and professor.department not in filters.departments:
        return False
    if professor.num_evals < filters.min_num_evals:
        return False
    return (
        _in_range(professor.overall_rating, filters.overall_rating)
        and _in_range(professor.material_clear, filters.material_clear)
        and _in_range(professor.student_difficulties, filters.student_difficulties)
    )


def _sort(professors: List[ProfessorT], sort_by: SortingOption) -> List[ProfessorT]:
    if sort_by == SortingOption.ALPHABETICAL:
        return sorted(
            professors, key=lambda p: (p.last_name.lower(), p.first_name.lower())
        )
    if sort_by == SortingOption.OVERALL_RATING:
        return sorted(professors, key=lambda p: p.overall_rating, reverse=True)
    if sort_by == SortingOption.MATERIAL_CLEAR:
        return sorted(professors, key=lambda p: p.material_clear, reverse=True)
    if sort_by == SortingOption.STUDENT_DIFFICULTIES:
        return sorted(professors, key=lambda p: p.student_difficulties, reverse=True)
    return professors


def apply_filters(
    professors: Sequence[ProfessorT], filters: Optional[ProfessorFilters] = None
) -> List[ProfessorT]:
    """Narrow and order search results; relevance keeps the incoming order."""
    filters = filters or ProfessorFilters()
    results = _sort([p for p in professors if _matches(p, filters)], filters.sort_by)
    if filters.reverse:
        results.reverse()
    return results
