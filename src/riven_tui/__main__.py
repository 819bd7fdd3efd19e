"""Allow ``python -m riven_tui``."""

from riven_tui.cli.main import run

if __name__ == "__main__":
    run()
