"""Pytest configuration and shared fixtures.

Test Categories:
| Category | Focus                               | Tools                      |
| unit     | Models, config, gateway, parser     | pytest, httpx.MockTransport |
| tui      | Router, screens, runtime, rendering | pytest, rich Console        |
"""

import sys
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from riven_tui.config.settings import Settings, UISettings  # noqa: E402
from riven_tui.models import ItemsResponse  # noqa: E402

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "tui: Router, screen and runtime tests")
    config.addinivalue_line("markers", "asyncio: Tests running on an event loop")


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No RIVEN_* variables, an empty home and an empty working directory."""
    import os

    for name in list(os.environ):
        if name.startswith("RIVEN_"):
            monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return tmp_path


@pytest.fixture
def ui_settings() -> UISettings:
    return UISettings()


@pytest.fixture
def settings() -> Settings:
    return Settings.from_dict(
        {"api": {"endpoint": "http://riven.test", "token": "secret-token", "timeout": "5s"}}
    )


# =============================================================================
# PAYLOAD FIXTURES
# =============================================================================


def make_item(item_id: Any, **extra) -> dict[str, Any]:
    payload = {
        "id": item_id,
        "title": f"Item {item_id}",
        "type": "movie",
        "state": "Completed",
        "year": 2020,
        "updated_at": "2024-05-01T12:30:00Z",
    }
    payload.update(extra)
    return payload


def make_items_response(
    count: int = 3, page: int = 1, total_pages: int = 3, total_items: int | None = None
) -> ItemsResponse:
    return ItemsResponse.model_validate(
        {
            "success": True,
            "items": [make_item(str(page * 100 + index)) for index in range(count)],
            "page": page,
            "limit": 50,
            "total_items": total_items if total_items is not None else count * total_pages,
            "total_pages": total_pages,
        }
    )


@pytest.fixture
def items_response() -> ItemsResponse:
    return make_items_response()


# =============================================================================
# RENDERING
# =============================================================================


def render_text(renderable, width: int = 120) -> str:
    """Render to plain text through a real rich console."""
    console = Console(file=StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(renderable)
    return console.file.getvalue()


@pytest.fixture
def items_factory():
    return make_items_response


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def render():
    return render_text
