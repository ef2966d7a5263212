"""Terminal app — maps keys to state machine actions and redraws each state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual import events, on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Input, Static

from savekeeper.core.state_machine import INPUT_STATES, Action, AppState
from savekeeper.i18n import t
from savekeeper.ui.constants import KEY_ACTIONS, NAME_MAX_LENGTH, NOTIFICATION_SECONDS, PLACEHOLDERS
from savekeeper.ui.theme import APP_CSS, apply_theme
from savekeeper.ui.views import help_text, render_body, render_notification

if TYPE_CHECKING:
    from savekeeper.context import AppContext


class SaveKeeperApp(App):
    """Single-screen app; every redraw is derived from the state machine."""

    CSS = APP_CSS
    AUTO_FOCUS = None
    BINDINGS = [Binding("ctrl+c", "quit_app", "Quit", priority=True, show=False)]

    def __init__(self, ctx: AppContext) -> None:
        super().__init__()
        self._ctx = ctx
        self._machine = ctx.machine
        self._shown_state: AppState | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="title")
        yield Static(id="notification")
        yield Static(id="body")
        yield Input(id="prompt")
        yield Static(id="help")

    def on_mount(self) -> None:
        apply_theme(self, dark=True)
        self.title = t("app.title")
        self._machine.start()
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        state = self._machine.state
        if state in INPUT_STATES:
            action = Action.BACK if event.key == "escape" else None
        else:
            action = KEY_ACTIONS.get(state, {}).get(event.key)
        if action is None:
            return
        event.stop()
        self._handle(action)

    @on(Input.Submitted, "#prompt")
    def _on_prompt_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._handle(Action.SUBMIT, event.value)

    def action_quit_app(self) -> None:
        self._handle(Action.QUIT)

    def _handle(self, action: Action, text: str = "") -> None:
        before = self._machine.state
        outcome = self._machine.dispatch(action, text)
        if outcome.quit:
            self.exit()
            return
        if outcome.notification is not None:
            token = outcome.notification.token
            self.set_timer(NOTIFICATION_SECONDS, lambda: self._clear_notification(token))
        if action is Action.SUBMIT and self._machine.state is before:
            # Rejected input is discarded so the user is re-prompted
            self.query_one("#prompt", Input).value = ""
        self._refresh_view()

    def _clear_notification(self, token: int) -> None:
        if self._machine.clear_notification(token):
            self._refresh_view()

    def _refresh_view(self) -> None:
        machine = self._machine
        state = machine.state

        self.query_one("#title", Static).update(t("app.title"))
        notification = self.query_one("#notification", Static)
        notification.update(render_notification(machine.notifier.current))
        notification.display = machine.notifier.current is not None
        self.query_one("#body", Static).update(render_body(machine, self._ctx.config))
        self.query_one("#help", Static).update(help_text(machine))

        prompt = self.query_one("#prompt", Input)
        if state in INPUT_STATES:
            if state is not self._shown_state:
                prompt.value = ""
                prompt.placeholder = t(PLACEHOLDERS[state])
                prompt.max_length = NAME_MAX_LENGTH if state is AppState.CREATE_BACKUP else 0
            prompt.display = True
            prompt.focus()
        else:
            prompt.display = False
            self.set_focus(None)

        self._shown_state = state
