"""
Professor search by name, class or department.

Name search is fuzzy: exact substring hits rank first, then near matches by
similarity score. Class and department searches are plain substring/prefix
filters that keep the input order.
"""

import re
from enum import Enum
from typing import List, Sequence, Tuple, TypeVar

from rapidfuzz import fuzz

from ..models.schema import ProfessorListing

DEFAULT_NAME_THRESHOLD = 80.0

ProfessorT = TypeVar("ProfessorT", bound=ProfessorListing)

_WHITESPACE = re.compile(r"\s+")


class SearchType(str, Enum):
    NAME = "name"
    CLASS = "class"
    DEPARTMENT = "department"


def _compact(value: str) -> str:
    return _WHITESPACE.sub("", value).upper()


def _course_department(course: str) -> str:
    return course.split(" ", 1)[0].upper()


def name_score(professor: ProfessorListing, term: str) -> float:
    """Similarity of `term` to the professor's name on a 0-100 scale."""
    needle = term.strip().lower()
    forward = f"{professor.first_name} {professor.last_name}".lower()
    backward = f"{professor.last_name}, {professor.first_name}".lower()

    if needle in forward or needle in backward:
        return 100.0

    return max(
        fuzz.partial_ratio(needle, forward),
        fuzz.token_sort_ratio(needle, forward),
    )


def _search_by_name(
    professors: Sequence[ProfessorT], term: str, threshold: float
) -> List[ProfessorT]:
    scored: List[Tuple[float, int, ProfessorT]] = []
    for position, professor in enumerate(professors):
        score = name_score(professor, term)
        if score >= threshold:
            scored.append((score, position, professor))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [professor for _, _, professor in scored]


def _search_by_class(professors: Sequence[ProfessorT], term: str) -> List[ProfessorT]:
    needle = _compact(term)
    return [
        professor
        for professor in professors
        if any(needle in _compact(course) for course in professor.courses)
    ]


def _search_by_department(
    professors: Sequence[ProfessorT], term: str
) -> List[ProfessorT]:
    needle = term.strip().upper()
    results = []
    for professor in professors:
        departments = {_course_department(course) for course in professor.courses}
        departments.add(professor.department.upper())
        if any(department.startswith(needle) for department in departments):
            results.append(professor)
    return results


def professor_search(
    professors: Sequence[ProfessorT],
    search_type: SearchType,
    term: str,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> List[ProfessorT]:
    """
    Narrow the professor list to those matching `term` in the chosen field.

    Args:
        professors: Full professor list
        search_type: Field to search (name, class or department)
        term: Free-text search term; blank returns every professor
        name_threshold: Minimum fuzzy score (0-100) for name matches

    Returns:
        Ordered subset of `professors`
    """
    if not term or not term.strip():
        return list(professors)

    search_type = SearchType(search_type)
    if search_type == SearchType.NAME:
        return _search_by_name(professors, term, name_threshold)
    if search_type == SearchType.CLASS:
        return _search_by_class(professors, term)
    return _search_by_department(professors, term)
