"""Theme configuration — Textual CSS and color scheme."""

from __future__ import annotations

from textual.app import App

APP_CSS = """
Screen {
    padding: 1 2;
}

#title {
    text-style: bold;
    color: $accent;
    margin-bottom: 1;
}

#notification {
    height: auto;
    margin-bottom: 1;
}

#body {
    height: auto;
}

#prompt {
    margin-top: 1;
    border: round $primary;
}

#help {
    dock: bottom;
    color: $text-muted;
}
"""


def apply_theme(app: App, dark: bool = True) -> None:
    """Apply the application theme."""
    app.theme = "textual-dark" if dark else "textual-light"
