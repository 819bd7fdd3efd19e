"""Riven TUI - terminal client for the Riven media-management service.

Screens:
1. Dashboard   - Library statistics, service health, Real-Debrid account
2. Media       - Paginated, searchable item library with bulk actions
3. Detail      - Single item with streams and actions
4. Settings    - Read-only overview of the server settings tree
5. Logs        - Server log tail
6. Events      - Live server-sent event feed
"""

__version__ = "0.2.0"

APP_NAME = "Riven TUI"

__all__ = ["APP_NAME", "__version__"]
