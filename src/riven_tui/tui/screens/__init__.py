"""Screen models, one per screen of the application."""

from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.screens.dashboard import DashboardModel
from riven_tui.tui.screens.events import EventsModel, StreamStatus
from riven_tui.tui.screens.help import HelpModel
from riven_tui.tui.screens.item_detail import ItemDetailModel
from riven_tui.tui.screens.items import ItemsMode, ItemsModel
from riven_tui.tui.screens.logs import LogsModel
from riven_tui.tui.screens.settings import SettingsModel

__all__ = [
    "DashboardModel",
    "EventsModel",
    "HelpModel",
    "ItemDetailModel",
    "ItemsMode",
    "ItemsModel",
    "LogsModel",
    "ScreenModel",
    "SettingsModel",
    "StreamStatus",
]
