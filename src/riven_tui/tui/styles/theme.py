"""riven-tui colour themes."""

from dataclasses import dataclass

from riven_tui.models import ItemState


@dataclass(frozen=True)
class RivenTheme:
    name: str = "default"

    primary: str = "#7D56F4"
    accent: str = "#04B575"
    muted: str = "#626262"
    text: str = "#FAFAFA"

    success: str = "#04B575"
    error: str = "#FF5F87"
    warning: str = "#FFB86C"
    info: str = "#8BE9FD"

    selected: str = "reverse"
    header: str = "bold #7D56F4"

    def state_color(self, state: ItemState) -> str:
        """Colour for an item state label."""
        colors = {
            ItemState.COMPLETED: self.success,
            ItemState.SYMLINKED: self.success,
            ItemState.DOWNLOADED: self.info,
            ItemState.FAILED: self.error,
            ItemState.PAUSED: self.warning,
            ItemState.PARTIALLY_COMPLETED: self.warning,
        }
        return colors.get(state, self.text)

    def health_color(self, healthy: bool) -> str:
        return self.success if healthy else self.error


DEFAULT = RivenTheme()

LIGHT = RivenTheme(
    name="light",
    primary="#5A3FC0",
    accent="#027A4F",
    muted="#8A8A8A",
    text="#1A1A1A",
    success="#027A4F",
    error="#C0245A",
    warning="#B36B00",
    info="#0069A8",
    header="bold #5A3FC0",
)

THEMES = {
    "default": DEFAULT,
    "dark": DEFAULT,
    "light": LIGHT,
}


def get_theme_by_name(name: str) -> RivenTheme:
    """Theme for a config name; unknown names fall back to the default."""
    return THEMES.get(name.lower(), DEFAULT)


def get_theme_names() -> list[str]:
    return list(THEMES.keys())
