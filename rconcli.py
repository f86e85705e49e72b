#!/usr/bin/env python3
from __future__ import annotations
import argparse, asyncio, json, logging, os, sys
from typing import Dict, Optional
from prompt_toolkit import print_formatted_text

from mc_rcon.config import resolve, HOST_VAR, PORT_VAR, PASSWORD_VAR, TIMEOUT_VAR
from mc_rcon.errors import RconError, ConfigurationError
from mc_rcon.formatting import strip_codes, to_formatted_text
from mc_rcon.rcon import RconClient

# process exit code per status; anything unlisted exits 1
EXIT_CODES = {502: 2, 503: 3, 511: 4, 500: 5}

# --- helpers -----------------------------------------------------------------

def _environ(args) -> Dict[str, str]:
    """os.environ with the --host/--port/--password/--timeout overrides applied."""
    env = dict(os.environ)
    for var, value in ((HOST_VAR, args.host), (PORT_VAR, args.port),
                       (PASSWORD_VAR, args.password), (TIMEOUT_VAR, args.timeout)):
        if value is not None:
            env[var] = str(value)
    return env

def _fail(e: RconError) -> int:
    status = int(e.status)
    print(f"[rcon error] {status} {e}", file=sys.stderr, flush=True)
    return EXIT_CODES.get(status, 1)

def run_command(client: RconClient, command: str):
    return asyncio.run(client.execute(command))

# --- exec / console / config -------------------------------------------------

def do_exec(args) -> int:
    client = RconClient(environ=_environ(args))
    try:
        response = run_command(client, " ".join(args.command))
    except RconError as e:
        return _fail(e)
    if args.json:
        print(json.dumps(response.as_dict()))
    else:
        print(response.payload if args.raw else strip_codes(response.payload))
    return 0

def do_console(args) -> int:
    """Opens the prompt_toolkit RCON console, or a line-mode prompt with --plain."""
    client = RconClient(environ=_environ(args))
    if args.plain:
        return _plain_console(client)

    from mc_rcon.rcon_ui import run_rcon_ui
    try:
        asyncio.run(run_rcon_ui(client, probe=args.probe))
    except KeyboardInterrupt:
        pass
    return 0

def _plain_console(client: RconClient) -> int:
    print("Interactive RCON. Type /quit to exit.")
    while True:
        try:
            cmd = input("> ").strip()
        except EOFError:
            break
        if cmd.lower() in ("/quit","quit","exit"): break
        if not cmd: continue
        try:
            print_formatted_text(to_formatted_text(run_command(client, cmd).payload))
        except RconError as e:
            print(f"[rcon error] {int(e.status)} {e}")
    return 0

def do_config(args) -> int:
    try:
        cfg = resolve(_environ(args))
    except ConfigurationError as e:
        return _fail(e)
    print(json.dumps(cfg.masked(), indent=2))
    return 0

# --- argparse ----------------------------------------------------------------

def build_parser():
    p = argparse.ArgumentParser(prog="rconcli.py", description="Run commands on a game server over RCON.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--host", help=f"Overrides {HOST_VAR}")
    p.add_argument("--port", help=f"Overrides {PORT_VAR}")
    p.add_argument("--password", help=f"Overrides {PASSWORD_VAR}")
    p.add_argument("--timeout", help=f"Overrides {TIMEOUT_VAR} (ms)")
    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("exec", help="Run one command and print the reply")
    pe.add_argument("command", nargs="+")
    pe.add_argument("--json", action="store_true", help='Print {"id", "payload"}')
    pe.add_argument("--raw", action="store_true", help="Keep § formatting codes in the output")
    pe.set_defaults(func=do_exec)

    pc = sub.add_parser("console", help="Open RCON console (prompt_toolkit)")
    pc.add_argument("--plain", action="store_true", help="Line-mode prompt instead of full screen")
    pc.add_argument("--probe", help="Command to send when the console opens, e.g. list")
    pc.set_defaults(func=do_console)

    sub.add_parser("config", help="Show the resolved configuration").set_defaults(func=do_config)

    return p

def main(argv: Optional[list] = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
