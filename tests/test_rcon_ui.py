import asyncio
import contextlib

from prompt_toolkit.application import create_app_session
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput
from prompt_toolkit.widgets import TextArea

from mc_rcon import rcon_ui
from mc_rcon.rcon import RconClient

from rcon_server import RESPONSE_VALUE, FakeRconServer, closed_port, packet


@contextlib.contextmanager
def _terminal():
    with create_pipe_input() as inp:
        with create_app_session(input=inp, output=DummyOutput()):
            yield inp


async def _wait_for_text(area: TextArea, needle: str, timeout: float = 5.0) -> None:
    async def poll() -> None:
        while needle not in area.text:
            await asyncio.sleep(0.01)
    await asyncio.wait_for(poll(), timeout)


def test_append_adds_text() -> None:
    async def body() -> None:
        area = TextArea(focusable=False, read_only=False)
        rcon_ui._append(None, area, "$ list\n")
        rcon_ui._append(None, area, "echo list\n")
        assert area.text == "$ list\necho list\n"

    asyncio.run(body())


def test_append_trims_to_limit(monkeypatch) -> None:
    monkeypatch.setattr(rcon_ui, "LOG_TRIM_LIMIT", 10)

    async def body() -> None:
        area = TextArea(focusable=False, read_only=False)
        rcon_ui._append(None, area, "0123456789abcdef")
        assert area.text == "6789abcdef"
        assert area.buffer.cursor_position == 10

    asyncio.run(body())


def test_shortcuts_cover_common_commands() -> None:
    assert "list" in rcon_ui.SHORTCUTS
    assert "help" in rcon_ui.SHORTCUTS


def test_probe_without_configuration_shows_hint() -> None:
    async def scenario() -> None:
        with _terminal():
            console = rcon_ui.RconConsole(RconClient(environ={}))
            assert console.target == "(not configured)"
            await console.rcon_probe()
            assert "'RCON_HOST' is not set" in console.log.text
            assert "[hint] Set RCON_HOST" in console.log.text

    asyncio.run(scenario())


def test_probe_success_shows_reply() -> None:
    async def scenario() -> None:
        async with FakeRconServer() as server:
            with _terminal():
                console = rcon_ui.RconConsole(RconClient(environ=server.environ()), probe="list")
                await console.rcon_probe()
                assert "[rcon] connected." in console.log.text
                assert "echo list" in console.log.text
            await server.wait_disconnects(1)

    asyncio.run(scenario())


def test_probe_failure_shows_hint() -> None:
    async def scenario() -> None:
        port = await closed_port()
        environ = {"RCON_HOST": "127.0.0.1", "RCON_PORT": str(port), "RCON_PASSWORD": "x"}
        with _terminal():
            console = rcon_ui.RconConsole(RconClient(environ=environ), probe="list")
            await console.rcon_probe()
            assert f"cannot reach 127.0.0.1:{port}" in console.log.text
            assert "[hint] Check enable-rcon" in console.log.text

    asyncio.run(scenario())


def test_send_strips_formatting_codes() -> None:
    async def coloured(req_id, kind, payload):
        if kind == 2:
            return packet(req_id, RESPONSE_VALUE, "§aThere are §l0§r players")
        return None

    async def scenario() -> None:
        async with FakeRconServer(handler=coloured) as server:
            with _terminal():
                console = rcon_ui.RconConsole(RconClient(environ=server.environ()))
                await console.send("list")
                assert console.log.text == "$ list\nThere are 0 players\n"

    asyncio.run(scenario())


def test_send_reports_errors_with_status() -> None:
    async def scenario() -> None:
        async with FakeRconServer() as server:
            with _terminal():
                console = rcon_ui.RconConsole(RconClient(environ=server.environ(RCON_PASSWORD="nope")))
                await console.send("list")
                assert console.log.text.startswith("$ list\n[rcon error] 511 ")

    asyncio.run(scenario())


def test_console_sends_typed_command_and_exits() -> None:
    async def scenario() -> None:
        async with FakeRconServer() as server:
            with _terminal() as inp:
                console = rcon_ui.RconConsole(RconClient(environ=server.environ()))
                task = asyncio.create_task(console.run())
                await _wait_for_text(console.log, "[rcon] ready.")

                inp.send_text("list\r")
                await _wait_for_text(console.log, "echo list")
                assert console.input_field.text == ""

                inp.send_text("\x03")  # Ctrl-C
                await asyncio.wait_for(task, 5)
            await server.wait_disconnects(1)
        assert [p for _, _, p in server.received] == ["secret", "list"]

    asyncio.run(scenario())
