"""Textual application hosting the cdnscli model."""

import logging
from typing import Optional

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import Static

from cdnscli.providers.base import Provider
from cdnscli.ui.messages import (
    Command,
    Emit,
    KeyPress,
    Message,
    Quit,
    Resize,
    SpinnerTick,
)
from cdnscli.ui.model import Model, Styles

logger = logging.getLogger(__name__)


def key_name(event: events.Key) -> str:
    """Name handed to the model: the character for printable keys, else Textual's key."""
    if event.key != "space" and event.is_printable and event.character:
        return event.character
    return event.key


class CdnsApp(App):
    """cdnscli - DNS zones and records TUI."""

    TITLE = "cdnscli"

    DEFAULT_CSS = """
    Screen {
        overflow: hidden;
    }
    #view {
        width: 100%;
        height: 100%;
    }
    """

    # Keys Textual may claim for focus changes, quitting or screen actions
    BINDINGS = [
        Binding(key, f"forward('{key}')", show=False, priority=True)
        for key in ("tab", "shift+tab", "escape", "ctrl+c", "ctrl+s", "ctrl+d")
    ]

    def __init__(self, provider: Provider, client_timeout: float = 10.0,
                 styles: Optional[Styles] = None):
        super().__init__()
        self.model = Model(provider, client_timeout=client_timeout, styles=styles)

    def compose(self) -> ComposeResult:
        yield Static(id="view")

    def on_mount(self) -> None:
        self.set_interval(self.model.spinner_interval, self._tick)
        self.model.update(Resize(self.size.width, self.size.height))
        for cmd in self.model.init():
            self.run_model_command(cmd)
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.send_to_model(KeyPress(key_name(event)))

    def on_resize(self, event: events.Resize) -> None:
        self.send_to_model(Resize(event.size.width, event.size.height))

    def action_forward(self, key: str) -> None:
        self.send_to_model(KeyPress(key))

    def _tick(self) -> None:
        if self.model.loading:
            self.send_to_model(SpinnerTick())

    def send_to_model(self, msg: Message) -> None:
        """Feed one message to the model and start the commands it returns."""
        if isinstance(msg, Quit):
            logger.debug("Quit requested")
            self.exit()
            return
        for cmd in self.model.update(msg):
            if isinstance(cmd, Emit):
                self.send_to_model(cmd.msg)
            else:
                self.run_model_command(cmd)
        self.refresh_view()

    @work(thread=True)
    def run_model_command(self, cmd: Command) -> None:
        """Run a command in a background thread and dispatch its result."""
        msg = cmd()
        if msg is not None:
            self.call_from_thread(self.send_to_model, msg)

    def refresh_view(self) -> None:
        try:
            view = self.query_one("#view", Static)
        except NoMatches:
            return
        view.update(Text(self.model.view(), no_wrap=True, overflow="crop"))
