"""Build interactive command shells with declared commands, completion, help and keybindings."""

__version__ = "1.2.1"
__all__ = [
    "cli",
    "command",
    "completer",
    "demo",
    "errors",
    "keybindings",
    "prompt",
    "repl",
    "style",
]