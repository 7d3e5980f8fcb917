from chatdeck.sessions.schema import SessionMetadata


def format_session(entry: SessionMetadata, current: str) -> str:
    marker = "*" if entry.id == current else " "
    touched = entry.last_touched.astimezone().strftime("%Y-%m-%d %H:%M")
    return f"{marker} {entry.id}  {touched}  {entry.preview}"


class BuiltinCommands:
    def __init__(self, runtime):
        self.runtime = runtime
        self._handlers = {
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
            "new": self.cmd_new,
            "sessions": self.cmd_sessions,
            "switch": self.cmd_switch,
            "history": self.cmd_history,
            "help": self.cmd_help,
        }

    def list_commands(self) -> list[str]:
        return sorted(self._handlers.keys())

    def has_command(self, name: str) -> bool:
        return name in self._handlers

    async def handle(self, name: str, args: str) -> bool:
        handler = self._handlers.get(name)
        if not handler:
            return True
        return await handler(args)

    async def cmd_quit(self, args: str) -> bool:
        print("👋 Goodbye!")
        return False

    async def cmd_new(self, args: str) -> bool:
        session_id = await self.runtime.coordinator.new_session()
        print(f"✅ Started new session {session_id}")
        return await self.cmd_history("")

    async def cmd_sessions(self, args: str) -> bool:
        sessions = self.runtime.directory.recent()
        if not sessions:
            print("No previous chats")
            return True
        current = self.runtime.pointer.get()
        print("Sessions:")
        for entry in sessions:
            print(f"  {format_session(entry, current)}")
        return True

    async def cmd_switch(self, args: str) -> bool:
        if not args:
            print("Usage: /switch <id>")
            return True
        if not await self.runtime.coordinator.switch_to(args):
            print(f"Already on session {args}")
            return True
        print(f"✅ Switched to session {args}")
        return await self.cmd_history("")

    async def cmd_history(self, args: str) -> bool:
        messages = self.runtime.controller.messages
        if not messages:
            print("No messages")
            return True
        for message in messages:
            print(f"{message.role}: {message.text}")
        return True

    async def cmd_help(self, args: str) -> bool:
        print("\nCommands:")
        for name in self.list_commands():
            print(f"  /{name}")
        print()
        return True
