"""Tab completion of command names, subcommands, options and values."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby
from typing import Mapping, Union

from .cli import Command
from .command import ReplCommand

_HELP_DESCRIPTION = "show help"


@dataclass(frozen=True)
class Span:
    """The part of the input line a suggestion replaces."""

    start: int
    end: int


@dataclass(frozen=True)
class Suggestion:
    """One completion candidate."""

    value: str
    span: Span
    description: str | None = None
    extra: tuple[str, ...] | None = None
    style: str | None = None
    append_whitespace: bool = True


class ReplCompleter:
    """Completes the commands known to a REPL."""

    def __init__(self, commands: Mapping[str, Union[ReplCommand, Command]]) -> None:
        self._commands: dict[str, Command] = {
            name: entry.command if isinstance(entry, ReplCommand) else entry
            for name, entry in commands.items()
        }

    def complete(self, line: str, pos: int) -> list[Suggestion]:
        """Return suggestions for the word ending at ``pos`` in ``line``."""
        if " " in line:
            words = line[:pos].split(" ")
            deepest: Command | None = None
            for word in words:
                if deepest is not None:
                    sub = deepest.find_subcommand(word)
                    if sub is not None:
                        deepest = sub
                else:
                    deepest = self._commands.get(word)
            if deepest is None:
                completions: list[Suggestion] = []
            else:
                last_word = words[-1]
                span = Span(len(line) - len(last_word), pos)
                completions = self._parameter_values_starting_with(deepest, last_word, span)
        else:
            completions = self._commands_starting_with(line, Span(0, pos))
        return [suggestion for suggestion, _ in groupby(completions)]

    @staticmethod
    def _suggest(value: str, help_text: str | None, span: Span) -> Suggestion:
        return Suggestion(value=value, span=span, description=help_text)

    def _parameter_values_starting_with(
        self, command: Command, search: str, span: Span
    ) -> list[Suggestion]:
        completions: list[Suggestion] = []
        for arg in command.arguments:
            completions.extend(
                self._suggest(choice.name, choice.help, span)
                for choice in arg.choices
                if choice.name.startswith(search)
            )
            if arg.long is not None:
                value = f"--{arg.long}"
                if value.startswith(search):
                    completions.append(self._suggest(value, arg.help, span))
            if arg.short is not None:
                value = f"-{arg.short}"
                if value.startswith(search):
                    completions.append(self._suggest(value, arg.help, span))

        completions.extend(
            self._suggest(sub.name, sub.after_help, span)
            for sub in command.subcommands
            if sub.name.startswith(search)
        )
        return completions

    def _commands_starting_with(self, search: str, span: Span) -> list[Suggestion]:
        result = [
            self._suggest(command.name, command.about, span)
            for key, command in self._commands.items()
            if key.startswith(search)
        ]
        if "help".startswith(search):
            result.append(self._suggest("help", _HELP_DESCRIPTION, span))
        return result