import asyncio
import logging

from common.events import ErrorEvent, Event, MessageAppendedEvent, StaleResultEvent
from chatdeck.runtime.builtins import BuiltinCommands

logger = logging.getLogger(__name__)


def print_event(event: Event) -> None:
    if isinstance(event, MessageAppendedEvent) and event.role == "model":
        print(f"\n🤖 {event.text}")
    elif isinstance(event, ErrorEvent):
        print(f"\n❌ {event.message}")
    elif isinstance(event, StaleResultEvent):
        logger.debug(f"Ignored late {event.kind} for session {event.session_id}")


def split_command(user_input: str) -> tuple[str, str] | None:
    """Return ``(name, args)`` for ``/name args`` input, None for a chat message."""
    if not user_input.startswith("/"):
        return None
    parts = user_input.split(maxsplit=1)
    args = parts[1].strip() if len(parts) > 1 else ""
    return parts[0].lstrip("/"), args


class ChatREPL:
    """Reads input on the main thread and drives the runtime on one event loop.

    The loop lives as long as the REPL so the HTTP client stays bound to it.
    """

    def __init__(self, runtime):
        self.runtime = runtime
        self.builtins = BuiltinCommands(runtime)
        self.loop = asyncio.new_event_loop()

    def _run(self, coro):
        return self.loop.run_until_complete(coro)

    def run(self) -> None:
        try:
            session_id = self._run(self.runtime.start())
            print(f"💬 chatdeck (session: {session_id})")
            print("Commands: /help for all commands")
            self._run(self.builtins.cmd_history(""))
            self._loop()
        except KeyboardInterrupt:
            print("\n\n⚠️  Interrupted")
        finally:
            self._shutdown()

    def _loop(self) -> None:
        while True:
            try:
                user_input = input("\n> ").strip()

                if not user_input:
                    continue

                command = split_command(user_input)
                if command is None:
                    self._run(self.runtime.process_user_message(user_input))
                    continue

                name, args = command
                if not self.builtins.has_command(name):
                    print(f"Unknown command: /{name}. Type /help for available commands.")
                    continue
                if not self._run(self.builtins.handle(name, args)):
                    break

            except KeyboardInterrupt:
                print("\n\n⚠️  Interrupted")
                break
            except EOFError:
                break
            except Exception as e:
                print(f"\n❌ Error: {e}")
                logger.exception("Unhandled error in REPL")

    def _shutdown(self) -> None:
        pending = asyncio.all_tasks(self.loop)
        for task in pending:
            task.cancel()
        if pending:
            self._run(asyncio.gather(*pending, return_exceptions=True))
        self._run(self.runtime.aclose())
        self.loop.close()
