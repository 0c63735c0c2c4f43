"""The prompt shown in front of each input line."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROMPT_INDICATOR = "〉"
DEFAULT_MULTILINE_INDICATOR = "::: "


@dataclass
class ReplPrompt:
    """A prompt with a changeable prefix followed by the default indicator."""

    prefix: str = "repl"

    def render(self) -> str:
        """Return the left-hand part of the prompt."""
        return self.prefix

    def indicator(self) -> str:
        """Return the indicator drawn after the prefix."""
        return DEFAULT_PROMPT_INDICATOR

    def __str__(self) -> str:
        return self.render() + self.indicator()