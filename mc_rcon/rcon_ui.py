# mc_rcon/rcon_ui.py
from __future__ import annotations

import asyncio
import contextlib
from typing import Iterable, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.document import Document
from prompt_toolkit.filters import has_focus
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Label, TextArea

from . import config as rcon_config
from .errors import ConfigurationError, RconError
from .formatting import strip_codes
from .rcon import RconClient

LOG_TRIM_LIMIT = 2_000_000  # keep last ~2MB in the in-memory text area

READY_HINT = "Try: list, say hello, time query daytime"

# Offered on <tab>; anything else can still be typed by hand.
SHORTCUTS = (
    "help",
    "list",
    "save-all",
    "say",
    "time query daytime",
    "time set day",
    "weather clear",
    "whitelist list",
    "difficulty",
    "seed",
)


class RconConsole:
    """Fullscreen RCON console: scrolling output pane plus an input bar."""

    def __init__(
        self,
        client: RconClient,
        probe: Optional[str] = None,
        shortcuts: Iterable[str] = SHORTCUTS,
    ) -> None:
        self.client = client
        self.probe = probe
        self.config_error: Optional[ConfigurationError] = None
        try:
            cfg = rcon_config.resolve(client.environ)
            self.target = f"{cfg.host}:{cfg.port}"
        except ConfigurationError as e:
            self.config_error = e
            self.target = "(not configured)"

        # Output pane (not focusable so user can't type into it, but NOT read_only)
        self.log = TextArea(
            style="class:log",
            focusable=False,
            scrollbar=True,
            wrap_lines=False,
            read_only=False,  # allow programmatic inserts
        )
        self.input_field = TextArea(
            height=1,
            prompt="> ",
            multiline=False,
            history=InMemoryHistory(),
            completer=WordCompleter(list(shortcuts), sentence=True),
        )
        status = Label(
            text=f"RCON — {self.target}    (Ctrl-C / Esc to exit)",
            style="class:status",
        )

        kb = KeyBindings()

        @kb.add("enter", filter=has_focus(self.input_field))
        async def _(event) -> None:
            cmd = (self.input_field.text or "").strip()
            if not cmd:
                return
            self.input_field.buffer.append_to_history()
            self.input_field.buffer.document = Document(text="")
            await self.send(cmd)

        @kb.add("c-c")
        @kb.add("escape")
        def _(event) -> None:
            event.app.exit()

        self.app = Application(
            layout=Layout(HSplit([status, self.log, self.input_field]), focused_element=self.input_field),
            key_bindings=kb,
            full_screen=True,
            style=Style.from_dict(
                {
                    "log": "bg:#0e162b #d1d5db",
                    "status": "reverse",
                }
            ),
        )

    def append(self, text: str) -> None:
        _append(self.app, self.log, text)

    async def send(self, cmd: str) -> None:
        try:
            response = await self.client.execute(cmd)
        except RconError as e:
            self.append(f"$ {cmd}\n[rcon error] {int(e.status)} {e}\n")
            return
        # the pane is plain text, so formatting codes are dropped rather than rendered
        self.append(f"$ {cmd}\n{strip_codes(response.payload)}\n")

    async def rcon_probe(self) -> None:
        if self.config_error is not None:
            self.append(
                f"[rcon] {self.config_error}\n"
                "[hint] Set RCON_HOST, RCON_PORT and RCON_PASSWORD, then start the console again.\n"
            )
            return
        if not self.probe:
            self.append(f"[rcon] ready. {READY_HINT}\n")
            return
        try:
            response = await self.client.execute(self.probe)
        except RconError as e:
            self.append(
                f"[rcon] cannot reach {self.target}: {e}\n"
                "[hint] Check enable-rcon, rcon.port and rcon.password in server.properties, "
                "and that no firewall is in the way.\n"
            )
            return
        self.append(f"[rcon] connected. {READY_HINT}\n")
        payload = strip_codes(response.payload).strip()
        if payload:
            self.append(payload + "\n")

    async def run(self) -> None:
        probe_task = asyncio.create_task(self.rcon_probe())
        try:
            await self.app.run_async()
        finally:
            probe_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await probe_task


async def run_rcon_ui(
    client: RconClient,
    probe: Optional[str] = None,
    shortcuts: Iterable[str] = SHORTCUTS,
) -> None:
    await RconConsole(client, probe=probe, shortcuts=shortcuts).run()


def _append(app: Optional[Application], area: TextArea, text: str) -> None:
    """
    Append text to the TextArea and keep the buffer size bounded.
    """
    buf = area.buffer
    buf.insert_text(text, move_cursor=True)
    if len(buf.text) > LOG_TRIM_LIMIT:
        new_text = buf.text[-LOG_TRIM_LIMIT:]
        buf.document = Document(new_text, cursor_position=len(new_text))
    if app is not None:
        app.invalidate()
