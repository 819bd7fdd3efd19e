"""Identifiers shared by the router, the screens and the runtime."""

from __future__ import annotations

from enum import Enum


class ScreenId(str, Enum):
    DASHBOARD = "dashboard"
    ITEMS = "items"
    ITEM_DETAIL = "item_detail"
    SETTINGS = "settings"
    LOGS = "logs"
    EVENTS = "events"
    HELP = "help"


class ViewState(str, Enum):
    """What a screen body shows. Exactly one at a time."""

    LOADING = "loading"
    ERROR = "error"
    CONTENT = "content"


class Resource(str, Enum):
    """Remote payloads a screen can ask the runtime to fetch."""

    STATS = "stats"
    SERVICES = "services"
    RD_USER = "rd_user"
    ITEMS = "items"
    STATES = "states"
    ITEM = "item"
    ITEM_STREAMS = "item_streams"
    LOGS = "logs"
    SETTINGS = "settings"
