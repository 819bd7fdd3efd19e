"""Dashboard payloads: library statistics, service health, Real-Debrid user."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from riven_tui.models.common import ItemState

SECONDS_PER_DAY = 24 * 60 * 60


class StatsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_items: int = 0
    total_movies: int = 0
    total_shows: int = 0
    total_seasons: int = 0
    total_episodes: int = 0
    total_symlinks: int = 0
    incomplete_items: int = 0
    incomplete_retries: dict[str, int] = Field(default_factory=dict)
    states: dict[str, int] = Field(default_factory=dict)

    def count(self, state: ItemState) -> int:
        return self.states.get(state.value, 0)


# service name -> healthy
ServicesResponse = dict[str, bool]
services_adapter: TypeAdapter[ServicesResponse] = TypeAdapter(ServicesResponse)


class RDUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int = 0
    username: str = ""
    email: str = ""
    points: int = 0
    locale: str = ""
    avatar: str = ""
    type: str = ""
    premium: int = 0  # seconds of premium left

    @property
    def premium_days(self) -> int:
        return self.premium // SECONDS_PER_DAY


class StatesResponse(BaseModel):
    success: bool = True
    states: list[str] = Field(default_factory=list)


class LogsResponse(BaseModel):
    logs: list[str] = Field(default_factory=list)
