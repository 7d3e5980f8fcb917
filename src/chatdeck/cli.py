from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from chatdeck.config import ClientConfig, ConfigError
from chatdeck.runtime.builtins import format_session
from chatdeck.runtime.repl import ChatREPL, print_event
from chatdeck.runtime.runtime import ChatRuntime


def main() -> int:
    load_dotenv()
    return _main(sys.argv[1:])


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chatdeck", description="chatdeck - multi-session chat client")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--state-dir", default=None, help="Where session state is kept")
    parser.add_argument("--base-url", default=None, help="Chat server base URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=False)

    chat = subparsers.add_parser("chat", help="Start the interactive chat REPL")
    chat.add_argument("--message", "-m", help="Send one message and exit")
    chat.add_argument("--offline", action="store_true", help="Use a local echo backend")

    subparsers.add_parser("sessions", help="List known sessions")
    subparsers.add_parser("new", help="Start a new session")

    switch = subparsers.add_parser("switch", help="Make a session active")
    switch.add_argument("session_id")

    return parser


def _load_config(args: argparse.Namespace) -> ClientConfig:
    config = ClientConfig.from_file(args.config) if args.config else ClientConfig.from_env()
    if args.state_dir:
        config.state_dir = args.state_dir
    if args.base_url:
        config.base_url = args.base_url
    if getattr(args, "offline", False):
        config.offline = True
    config.validate()
    return config


def _main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    cmd = args.command or "chat"
    if cmd == "chat":
        return _cmd_chat(config, getattr(args, "message", None))
    if cmd == "sessions":
        return _cmd_sessions(config)
    if cmd == "new":
        return _cmd_new(config)
    if cmd == "switch":
        return _cmd_switch(config, args.session_id)

    parser.print_help()
    return 2


def _cmd_chat(config: ClientConfig, message: str | None) -> int:
    runtime = ChatRuntime(config, on_event=print_event)
    if message:
        return asyncio.run(_send_once(runtime, message))
    ChatREPL(runtime).run()
    return 0


async def _send_once(runtime: ChatRuntime, message: str) -> int:
    try:
        await runtime.start()
        sent = await runtime.process_user_message(message)
        if not sent:
            print("Nothing sent", file=sys.stderr)
            return 1
        return 1 if runtime.controller.last_error else 0
    finally:
        await runtime.aclose()


def _cmd_sessions(config: ClientConfig) -> int:
    runtime = ChatRuntime(config)
    sessions = runtime.directory.recent()
    if not sessions:
        print("No previous chats")
        return 0
    current = runtime.pointer.get()
    for entry in sessions:
        print(format_session(entry, current))
    return 0


def _cmd_new(config: ClientConfig) -> int:
    runtime = ChatRuntime(config)
    print(runtime.pointer.create_new())
    return 0


def _cmd_switch(config: ClientConfig, session_id: str) -> int:
    runtime = ChatRuntime(config)
    session_id = session_id.strip()
    if not session_id:
        print("Error: session id is required", file=sys.stderr)
        return 2
    if runtime.directory.get(session_id) is None:
        print(f"Note: {session_id} is not in the session list yet", file=sys.stderr)
    runtime.pointer.set(session_id)
    print(f"✅ Active session: {session_id}")
    return 0
