"""A command registered with the REPL together with its handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .cli import ArgMatches, Command

Callback = Callable[[ArgMatches, Any], Optional[str]]
AsyncCallback = Callable[[ArgMatches, Any], Awaitable[Optional[str]]]


@dataclass(eq=False)
class ReplCommand:
    """A named command with exactly one synchronous or asynchronous handler."""

    name: str
    command: Command
    callback: Callback | None = None
    async_callback: AsyncCallback | None = None

    def __post_init__(self) -> None:
        if (self.callback is None) == (self.async_callback is None):
            raise ValueError(
                f"command '{self.name}' needs exactly one of callback or async_callback"
            )

    def is_async(self) -> bool:
        """True when the handler is a coroutine function."""
        return self.async_callback is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReplCommand):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Command(name={self.name!r})"