"""Application state threaded through ``router.handle`` and ``router.render``."""

from __future__ import annotations

from dataclasses import dataclass, field

from riven_tui.config.settings import UISettings
from riven_tui.tui.screens import (
    DashboardModel,
    EventsModel,
    HelpModel,
    ItemDetailModel,
    ItemsModel,
    LogsModel,
    ScreenModel,
    SettingsModel,
)
from riven_tui.tui.styles.theme import DEFAULT, RivenTheme
from riven_tui.tui.types import ScreenId

SCREEN_CLASSES: dict[ScreenId, type[ScreenModel]] = {
    ScreenId.DASHBOARD: DashboardModel,
    ScreenId.ITEMS: ItemsModel,
    ScreenId.SETTINGS: SettingsModel,
    ScreenId.LOGS: LogsModel,
    ScreenId.EVENTS: EventsModel,
    ScreenId.HELP: HelpModel,
}


@dataclass
class Toast:
    """A transient notification shown under the active screen."""

    text: str
    level: str  # "success" or "error"
    created_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now >= self.created_at + self.ttl


@dataclass
class AppState:
    ui: UISettings
    theme: RivenTheme
    screens: dict[ScreenId, ScreenModel]
    active: ScreenId = ScreenId.DASHBOARD
    previous: ScreenId = ScreenId.DASHBOARD
    width: int = 0
    height: int = 0
    item_detail: ItemDetailModel | None = None
    visits: int = 0
    activated: set[ScreenId] = field(default_factory=set)
    toasts: list[Toast] = field(default_factory=list)
    quitting: bool = False

    @classmethod
    def create(cls, ui: UISettings | None = None, theme: RivenTheme = DEFAULT) -> AppState:
        ui = ui or UISettings()
        screens = {screen_id: klass(ui, theme) for screen_id, klass in SCREEN_CLASSES.items()}
        return cls(ui=ui, theme=theme, screens=screens)

    @property
    def active_screen(self) -> ScreenModel:
        if self.active is ScreenId.ITEM_DETAIL and self.item_detail is not None:
            return self.item_detail
        return self.screens[self.active]

    def screen(self, screen_id: ScreenId) -> ScreenModel | None:
        if screen_id is ScreenId.ITEM_DETAIL:
            return self.item_detail
        return self.screens.get(screen_id)
