"""Media item payloads and the listing query."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from riven_tui.models.common import ItemState, MediaType, SortOrder

DEFAULT_PAGE_SIZE = 50
TITLE_WIDTH = 38

# Filter cycle driven by the `f` key on the items screen.
STATE_FILTER_CYCLE: tuple[ItemState | None, ...] = (
    None,
    ItemState.FAILED,
    ItemState.COMPLETED,
    ItemState.DOWNLOADED,
)

MEDIA_TYPE_CYCLE: tuple[MediaType | None, ...] = (
    None,
    MediaType.MOVIE,
    MediaType.SHOW,
    MediaType.SEASON,
    MediaType.EPISODE,
)


def _cycle(options: tuple, current):
    index = options.index(current) if current in options else 0
    return options[(index + 1) % len(options)]


def _to_str(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _to_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ItemSummary(BaseModel):
    """One row of the paginated listing. Unknown keys are kept as extras."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    type: str = ""
    state: ItemState = ItemState.UNKNOWN
    year: int | None = None
    imdb_id: str = ""
    tvdb_id: str = ""
    tmdb_id: str = ""
    requested_at: str = ""
    updated_at: str = ""
    scraped_at: str = ""
    scraped_times: int = 0

    @field_validator("id", "title", "type", "imdb_id", "tvdb_id", "tmdb_id",
                     "requested_at", "updated_at", "scraped_at", mode="before")
    @classmethod
    def _text(cls, value):
        return _to_str(value)

    @field_validator("state", mode="before")
    @classmethod
    def _state(cls, value):
        return ItemState.UNKNOWN if value in (None, "") else value

    @field_validator("year", mode="before")
    @classmethod
    def _year(cls, value):
        return _to_int(value)

    @field_validator("scraped_times", mode="before")
    @classmethod
    def _times(cls, value):
        return value or 0

    @property
    def short_title(self) -> str:
        if len(self.title) <= TITLE_WIDTH:
            return self.title
        return self.title[: TITLE_WIDTH - 3] + "..."

    @property
    def updated_date(self) -> str:
        """Date part of an RFC 3339 timestamp."""
        return self.updated_at.split("T", 1)[0] if self.updated_at else ""


class ItemsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    items: list[ItemSummary] = Field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total_items: int = 0
    total_pages: int = 0

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value):
        return [] if value is None else value

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value):
        return max(int(value or 1), 1)

    @field_validator("total_items", "total_pages", mode="before")
    @classmethod
    def _non_negative(cls, value):
        return max(int(value or 0), 0)


class Stream(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    raw_title: str = ""
    parsed_title: str = ""
    infohash: str = ""
    rank: int = 0
    lev_ratio: float = 0.0
    blacklisted: bool = False

    @field_validator("id", "infohash", "raw_title", "parsed_title", mode="before")
    @classmethod
    def _text(cls, value):
        return _to_str(value)

    @field_validator("rank", "lev_ratio", mode="before")
    @classmethod
    def _scores(cls, value):
        return value or 0

    @field_validator("blacklisted", mode="before")
    @classmethod
    def _blacklisted(cls, value):
        return bool(value)

    @property
    def label(self) -> str:
        return self.raw_title or self.parsed_title or self.infohash or self.id


class MediaItem(ItemSummary):
    """Full item as returned by ``/items/{id}``."""

    aired_at: str = ""
    overview: str = ""
    is_anime: bool = False
    parent_id: str = ""
    season_number: int | None = None
    episode_number: int | None = None
    file: str = ""
    folder: str = ""
    symlinked: bool = False
    streams: list[Stream] = Field(default_factory=list)

    @field_validator("aired_at", "overview", "parent_id", "file", "folder", mode="before")
    @classmethod
    def _more_text(cls, value):
        return _to_str(value)

    @field_validator("is_anime", "symlinked", mode="before")
    @classmethod
    def _flags(cls, value):
        return bool(value)

    @field_validator("season_number", "episode_number", mode="before")
    @classmethod
    def _numbers(cls, value):
        return _to_int(value)

    @field_validator("streams", mode="before")
    @classmethod
    def _streams(cls, value):
        return parse_streams(value)


def parse_streams(payload: Any) -> list[Stream]:
    """Accept the shapes the service uses for stream collections.

    ``/items/{id}/streams`` answers with ``{"streams": [...]}``; embedded
    streams may be a list or a mapping keyed by infohash.
    """
    if payload is None:
        return []
    if isinstance(payload, dict):
        if "streams" in payload:
            return parse_streams(payload["streams"])
        values = []
        for key, value in payload.items():
            entry = dict(value) if isinstance(value, dict) else {"raw_title": str(value)}
            entry.setdefault("infohash", key)
            values.append(entry)
        payload = values
    return _streams_adapter.validate_python(list(payload))


_streams_adapter: TypeAdapter[list[Stream]] = TypeAdapter(list[Stream])


@dataclass(frozen=True)
class ItemsQuery:
    """Filters for the items listing. Any filter change resets the page."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: str = ""
    state: ItemState | None = None
    sort: SortOrder = SortOrder.DATE_DESC
    media_type: MediaType | None = None

    def to_params(self) -> dict[str, str]:
        params = {
            "limit": str(self.limit),
            "page": str(self.page),
            "sort": self.sort.value,
        }
        if self.media_type is not None:
            params["type"] = self.media_type.value
        if self.state is not None:
            params["states"] = self.state.value
        if self.search:
            params["search"] = self.search
        return params

    def with_page(self, page: int) -> ItemsQuery:
        return replace(self, page=page)

    def with_search(self, search: str) -> ItemsQuery:
        return replace(self, search=search, page=1)

    def next_state_filter(self) -> ItemsQuery:
        return replace(self, state=_cycle(STATE_FILTER_CYCLE, self.state), page=1)

    def next_sort(self) -> ItemsQuery:
        return replace(self, sort=self.sort.next(), page=1)

    def next_media_type(self) -> ItemsQuery:
        return replace(self, media_type=_cycle(MEDIA_TYPE_CYCLE, self.media_type), page=1)

    def cleared(self) -> ItemsQuery:
        return ItemsQuery(limit=self.limit)
