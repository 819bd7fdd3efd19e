"""Dashboard screen: library statistics, service health, Real-Debrid user."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from riven_tui.models import ItemState, RDUser, StatsResponse
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import Resource, ScreenId

# States shown in the stats panel, in display order.
STAT_STATES = (
    ItemState.COMPLETED,
    ItemState.DOWNLOADED,
    ItemState.SYMLINKED,
    ItemState.FAILED,
    ItemState.PAUSED,
    ItemState.REQUESTED,
)


class DashboardModel(ScreenModel):
    SCREEN_ID = ScreenId.DASHBOARD
    SCREEN_TITLE = "Dashboard"
    RESOURCES = (Resource.STATS, Resource.SERVICES, Resource.RD_USER)
    OPTIONAL_RESOURCES = frozenset({Resource.RD_USER})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stats: StatsResponse | None = None
        self.services: dict[str, bool] | None = None
        self.rd_user: RDUser | None = None

    @property
    def refresh_seconds(self) -> float:
        return self.ui.dashboard_refresh

    @property
    def has_content(self) -> bool:
        return any(part is not None for part in (self.stats, self.services, self.rd_user))

    def apply(self, resource: Resource, data) -> None:
        if resource is Resource.STATS:
            self.stats = data
        elif resource is Resource.SERVICES:
            self.services = dict(data)
        elif resource is Resource.RD_USER:
            self.rd_user = data

    def render_content(self) -> RenderableType:
        sections: list[RenderableType] = []
        if self.stats is not None:
            sections.append(self._render_stats(self.stats))
        if self.services is not None:
            sections.append(self._render_services(self.services))
        if self.rd_user is not None:
            sections.append(self._render_rd_user(self.rd_user))
        sections.append(self.status_line())
        return Group(*sections)

    def _panel(self, body: RenderableType, title: str) -> Panel:
        return Panel(
            body,
            title=Text(title, style=self.theme.header),
            title_align="left",
            border_style=self.theme.primary,
            padding=(0, 2),
        )

    def _render_stats(self, stats: StatsResponse) -> Panel:
        totals = Text()
        totals.append(f"Total Items: {stats.total_items}\n", style="bold")
        totals.append(
            f"Movies: {stats.total_movies} | Shows: {stats.total_shows} | "
            f"Seasons: {stats.total_seasons} | Episodes: {stats.total_episodes}\n"
        )
        totals.append(f"Symlinks: {stats.total_symlinks} | Incomplete: {stats.incomplete_items}")

        states = Table.grid(padding=(0, 2))
        for _ in range(3):
            states.add_column()
            states.add_column(justify="right")
        cells: list[Text] = []
        for state in STAT_STATES:
            cells.append(Text(state.value, style=self.theme.state_color(state)))
            cells.append(Text(str(stats.count(state))))
        for start in range(0, len(cells), 6):
            states.add_row(*cells[start : start + 6])

        return self._panel(Group(totals, Text(""), Text("States:"), states), "System Statistics")

    def _render_services(self, services: dict[str, bool]) -> Panel:
        if not services:
            return self._panel(Text("No services reported", style=self.theme.muted), "Services")
        lines = Text()
        for index, (name, healthy) in enumerate(sorted(services.items())):
            if index:
                lines.append("\n")
            lines.append("● " if healthy else "✗ ", style=self.theme.health_color(healthy))
            lines.append(name)
        return self._panel(lines, "Services")

    def _render_rd_user(self, user: RDUser) -> Panel:
        body = Text(
            f"Username: {user.username}\n"
            f"Type: {user.type}\n"
            f"Points: {user.points}\n"
            f"Premium Days Left: {user.premium_days}"
        )
        return self._panel(body, "Real-Debrid User")
