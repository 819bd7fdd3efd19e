"""Shared enums and small response shapes used across the Riven API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemState(str, Enum):
    """Lifecycle label the service attaches to a media item.

    The client never reasons about transitions between these; they are only
    used for filtering and display. Unrecognised labels become ``UNKNOWN``.
    """

    UNKNOWN = "Unknown"
    UNRELEASED = "Unreleased"
    ONGOING = "Ongoing"
    REQUESTED = "Requested"
    INDEXED = "Indexed"
    SCRAPED = "Scraped"
    DOWNLOADED = "Downloaded"
    SYMLINKED = "Symlinked"
    COMPLETED = "Completed"
    PARTIALLY_COMPLETED = "PartiallyCompleted"
    FAILED = "Failed"
    PAUSED = "Paused"

    @classmethod
    def _missing_(cls, value: object) -> ItemState:
        return cls.UNKNOWN


class MediaType(str, Enum):
    MOVIE = "movie"
    SHOW = "show"
    SEASON = "season"
    EPISODE = "episode"


class SortOrder(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]

    def next(self) -> SortOrder:
        """Return the following order in the fixed four-step cycle."""
        index = SORT_CYCLE.index(self)
        return SORT_CYCLE[(index + 1) % len(SORT_CYCLE)]


SORT_CYCLE: tuple[SortOrder, ...] = (
    SortOrder.DATE_DESC,
    SortOrder.DATE_ASC,
    SortOrder.TITLE_ASC,
    SortOrder.TITLE_DESC,
)

SORT_LABELS = {
    SortOrder.DATE_DESC: "Date ↓",
    SortOrder.DATE_ASC: "Date ↑",
    SortOrder.TITLE_ASC: "Title ↑",
    SortOrder.TITLE_DESC: "Title ↓",
}


class ItemAction(str, Enum):
    """Mutating commands the service accepts for a set of item ids."""

    RETRY = "retry"
    RESET = "reset"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    REMOVE = "remove"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""


class ActionResponse(BaseModel):
    """Acknowledgement returned by retry/reset/pause/unpause/remove."""

    model_config = ConfigDict(extra="allow")

    message: str = ""
    ids: list[str] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def _none_message(cls, value):
        return "" if value is None else value

    @field_validator("ids", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        if value is None:
            return []
        return [str(v) for v in value]
