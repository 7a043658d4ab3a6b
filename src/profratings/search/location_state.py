"""
Search query persistence across navigation.

A search page keeps its query in the state of the current history entry, so
going back to a search restores the previous query. A navigation that arrives
without state and with a new history key is a fresh visit and starts a new
search session.
"""

import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar
from urllib.parse import parse_qs, quote, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from .professor_search import SearchType

SEARCH_STATE_KEY = "searchState"

T = TypeVar("T")


class SearchState(BaseModel):
    """Search type and term as entered in the search bar"""

    type: SearchType = SearchType.NAME
    search_value: str = Field(alias="searchValue", default="")

    model_config = ConfigDict(populate_by_name=True)

    def to_path(self) -> str:
        return f"/search/{self.type.value}?term={quote(self.search_value)}"


def search_state_from_url(url: str) -> SearchState:
    """Initial search state from a ``/search/<type>?term=<term>`` URL."""
    parts = urlsplit(url)
    segments = [segment for segment in parts.path.split("/") if segment]

    search_type = SearchType.NAME
    if len(segments) >= 2 and segments[0] == "search":
        try:
            search_type = SearchType(segments[1])
        except ValueError:
            pass

    term = parse_qs(parts.query).get("term", [""])[0]
    return SearchState(type=search_type, search_value=term)


def _new_key() -> str:
    return secrets.token_hex(4)


@dataclass
class Location:
    path: str
    key: str = field(default_factory=_new_key)
    state: Optional[Dict[str, Any]] = None


class NavigationHistory:
    """In-memory browser-style history stack."""

    def __init__(self, initial_path: str = "/"):
        self.entries: List[Location] = [Location(path=initial_path)]
        self.index = 0

    @property
    def location(self) -> Location:
        return self.entries[self.index]

    def push(self, path: str, state: Optional[Dict[str, Any]] = None) -> Location:
        # Pushing discards any forward entries
        del self.entries[self.index + 1 :]
        self.entries.append(Location(path=path, state=state))
        self.index += 1
        return self.location

    def replace(self, path: str, state: Optional[Dict[str, Any]] = None) -> Location:
        current = self.location
        self.entries[self.index] = Location(path=path, key=current.key, state=state)
        return self.location

    def back(self) -> Location:
        if self.index > 0:
            self.index -= 1
        return self.location

    def forward(self) -> Location:
        if self.index < len(self.entries) - 1:
            self.index += 1
        return self.location


class LocationState(Generic[T]):
    """A named value stored in the current history entry's state."""

    def __init__(self, history: NavigationHistory, name: str, initial: T):
        self.history = history
        self.name = name
        self.initial = initial

    def get(self) -> T:
        state = self.history.location.state or {}
        return state.get(self.name, self.initial)

    def set(self, value: T) -> None:
        current = self.history.location
        state = dict(current.state or {})
        state[self.name] = value
        self.history.replace(current.path, state)


class SearchSessionKey:
    """
    Tracks which history key the search page was last mounted for.

    Clicking the search link in the nav bar creates an entry without state,
    which must clear the page. Returning via back navigation lands on an
    entry that has state, which must keep it.
    """

    def __init__(self):
        self.prev_key = ""

    def resolve(self, location: Location) -> str:
        if not location.state and location.key and self.prev_key != location.key:
            self.prev_key = location.key
        return self.prev_key


def search_location_state(history: NavigationHistory) -> LocationState[SearchState]:
    """Location-backed search state seeded from the current URL."""
    initial = search_state_from_url(history.location.path)
    return LocationState(history, SEARCH_STATE_KEY, initial)
