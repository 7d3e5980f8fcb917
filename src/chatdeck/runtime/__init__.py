from chatdeck.runtime.repl import ChatREPL
from chatdeck.runtime.runtime import ChatRuntime

__all__ = ["ChatREPL", "ChatRuntime"]
