"""A small declarative command-line parser for REPL commands."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

from .errors import IllegalDefaultError, IllegalRequiredError

_HELP_SUBCOMMAND_TEXT = "Print this message or the help of the given subcommand(s)"


class ArgAction(Enum):
    """What happens when an argument is met on the command line."""

    SET = "set"
    APPEND = "append"
    SET_TRUE = "set_true"
    SET_FALSE = "set_false"
    COUNT = "count"

    @property
    def takes_value(self) -> bool:
        return self in (ArgAction.SET, ArgAction.APPEND)


@dataclass(frozen=True)
class PossibleValue:
    """One allowed value of an argument, with optional help."""

    name: str
    help: str | None = None


@dataclass
class Arg:
    """A positional argument, option or flag of a command."""

    name: str
    required: bool = False
    long: str | None = None
    short: str | None = None
    help: str | None = None
    action: ArgAction = ArgAction.SET
    choices: Sequence[PossibleValue | str] = ()
    default: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("argument name must not be empty")
        if self.short is not None and len(self.short) != 1:
            raise ValueError(f"short name of '{self.name}' must be one character")
        self.choices = tuple(
            c if isinstance(c, PossibleValue) else PossibleValue(c) for c in self.choices
        )
        if self.required and self.default is not None:
            raise IllegalDefaultError(self.name)
        if self.required and not self.action.takes_value:
            raise IllegalRequiredError(self.name)

    def is_positional(self) -> bool:
        """True when the argument has neither a long nor a short name."""
        return self.long is None and self.short is None

    @property
    def _display(self) -> str:
        suffix = "..." if self.action is ArgAction.APPEND else ""
        if self.is_positional():
            return f"<{self.name}>{suffix}"
        flag = f"--{self.long}" if self.long is not None else f"-{self.short}"
        if self.action.takes_value:
            return f"{flag} <{self.name}>{suffix}"
        return flag

    @property
    def _help_left(self) -> str:
        suffix = "..." if self.action is ArgAction.APPEND else ""
        if self.is_positional():
            inner = self.name
            return (f"<{inner}>" if self.required else f"[{inner}]") + suffix
        names = []
        if self.short is not None:
            names.append(f"-{self.short}")
        if self.long is not None:
            names.append(f"--{self.long}")
        left = ", ".join(names)
        if self.short is None:
            left = "    " + left
        if self.action.takes_value:
            left += f" <{self.name}>{suffix}"
        return left

    @property
    def _help_right(self) -> str:
        parts = [self.help] if self.help else []
        if self.default is not None:
            parts.append(f"[default: {self.default}]")
        if self.choices:
            names = ", ".join(c.name for c in self.choices)
            parts.append(f"[possible values: {names}]")
        return " ".join(parts)


class UsageError(Exception):
    """The command line did not fit the command, or help was asked for.

    When ``usage`` is None the message is help or version text meant for
    standard output rather than an error.
    """

    def __init__(self, message: str, usage: str | None) -> None:
        super().__init__(message)
        self.message = message
        self.usage = usage
        self.is_help = usage is None

    def __str__(self) -> str:
        if self.usage is None:
            return self.message
        return (
            f"error: {self.message}\n\n{self.usage}\n\n"
            "For more information, try '--help'."
        )


@dataclass
class ArgMatches:
    """The values a command line supplied for a command's arguments."""

    values: dict[str, object]
    known: frozenset[str] = field(default_factory=frozenset)
    nested: tuple[str, ArgMatches] | None = None

    def _check(self, name: str) -> None:
        if name not in self.known:
            raise KeyError(f"unknown argument '{name}'")

    def get_one(self, name: str) -> object:
        """Return the (first) value of an argument, or None if it was not given."""
        self._check(name)
        value = self.values.get(name)
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def get_flag(self, name: str) -> bool:
        """Return the state of a flag argument."""
        self._check(name)
        value = self.values.get(name)
        if not isinstance(value, bool):
            raise TypeError(f"argument '{name}' is not a flag")
        return value

    def subcommand(self) -> tuple[str, ArgMatches] | None:
        """Return the name and matches of the subcommand that was given."""
        return self.nested

    def subcommand_name(self) -> str | None:
        """Return the name of the subcommand that was given."""
        return self.nested[0] if self.nested else None

    def __contains__(self, name: object) -> bool:
        return self.values.get(name) is not None  # type: ignore[call-overload]

    def __getitem__(self, name: str) -> object:
        return self.values[name]


class Command:
    """A command with its arguments and subcommands."""

    def __init__(
        self,
        name: str,
        about: str | None = None,
        version: str | None = None,
        after_help: str | None = None,
    ) -> None:
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(f"invalid command name {name!r}")
        self.name = name
        self.about = about
        self.version = version
        self.after_help = after_help
        self.arguments: list[Arg] = []
        self.subcommands: list[Command] = []

    def __repr__(self) -> str:
        return f"Command({self.name!r})"

    def arg(self, arg: Arg) -> Command:
        """Add an argument and return the command."""
        for existing in self.arguments:
            if existing.name == arg.name:
                raise ValueError(f"argument '{arg.name}' is already defined on '{self.name}'")
            if arg.long is not None and existing.long == arg.long:
                raise ValueError(f"long name '--{arg.long}' is already used on '{self.name}'")
            if arg.short is not None and existing.short == arg.short:
                raise ValueError(f"short name '-{arg.short}' is already used on '{self.name}'")
        self.arguments.append(arg)
        return self

    def subcommand(self, command: Command) -> Command:
        """Add a subcommand and return the command."""
        if self.find_subcommand(command.name) is not None:
            raise ValueError(f"subcommand '{command.name}' is already defined on '{self.name}'")
        self.subcommands.append(command)
        return self

    def find_subcommand(self, name: str) -> Command | None:
        """Return the subcommand with the given name, if any."""
        return next((c for c in self.subcommands if c.name == name), None)

    def parse(self, argv: Iterable[str]) -> ArgMatches:
        """Parse argv, whose first item is the command name itself."""
        tokens = list(argv)
        return self._parse(tokens[1:], self.name)

    def usage(self) -> str:
        """Return the usage line."""
        return self._usage(self.name)

    def render_help(self) -> str:
        """Return the full help text."""
        return self._help(self.name)

    # parsing

    def _error(self, message: str, path: str) -> UsageError:
        return UsageError(message, self._usage(path))

    def _parse(self, tokens: list[str], path: str) -> ArgMatches:
        values: dict[str, object] = {}
        positionals = [a for a in self.arguments if a.is_positional()]
        queue = deque(tokens)
        only_positional = False
        position = 0
        seen_positional = False
        nested: tuple[str, ArgMatches] | None = None

        while queue:
            token = queue.popleft()
            if not only_positional:
                if token == "--":
                    only_positional = True
                    continue
                if token.startswith("--"):
                    self._take_long(token[2:], queue, values, path)
                    continue
                if token.startswith("-") and len(token) > 1:
                    self._take_short(token[1:], queue, values, path)
                    continue
                if not seen_positional and self.subcommands:
                    if token == "help" and self.find_subcommand("help") is None:
                        self._raise_help_for(list(queue), path)
                    sub = self.find_subcommand(token)
                    if sub is not None:
                        nested = (sub.name, sub._parse(list(queue), f"{path} {sub.name}"))
                        break
            if position >= len(positionals):
                raise self._error(f"unexpected argument '{token}' found", path)
            arg = positionals[position]
            self._store(arg, token, values, path)
            seen_positional = True
            if arg.action is not ArgAction.APPEND:
                position += 1

        missing = [a for a in self.arguments if a.required and a.name not in values]
        if missing:
            listed = "\n".join(f"  {a._display}" for a in missing)
            raise self._error(
                f"the following required arguments were not provided:\n{listed}", path
            )

        for arg in self.arguments:
            if arg.name in values:
                continue
            if arg.default is not None:
                values[arg.name] = (
                    [arg.default] if arg.action is ArgAction.APPEND else arg.default
                )
            elif arg.action is ArgAction.SET_TRUE:
                values[arg.name] = False
            elif arg.action is ArgAction.SET_FALSE:
                values[arg.name] = True
            elif arg.action is ArgAction.COUNT:
                values[arg.name] = 0

        known = frozenset(a.name for a in self.arguments)
        return ArgMatches(values, known, nested)

    def _store(self, arg: Arg, raw: str, values: dict[str, object], path: str) -> None:
        if arg.choices and raw not in {c.name for c in arg.choices}:
            names = ", ".join(c.name for c in arg.choices)
            raise self._error(
                f"invalid value '{raw}' for '{arg._display}'\n  [possible values: {names}]",
                path,
            )
        if arg.action is ArgAction.APPEND:
            values.setdefault(arg.name, []).append(raw)  # type: ignore[union-attr]
            return
        if arg.name in values:
            raise self._error(
                f"the argument '{arg._display}' cannot be used multiple times", path
            )
        values[arg.name] = raw

    def _flag(self, arg: Arg, values: dict[str, object], path: str) -> None:
        if arg.action is ArgAction.COUNT:
            values[arg.name] = int(values.get(arg.name, 0)) + 1  # type: ignore[arg-type]
            return
        if arg.name in values:
            raise self._error(
                f"the argument '{arg._display}' cannot be used multiple times", path
            )
        values[arg.name] = arg.action is ArgAction.SET_TRUE

    def _value_for(self, arg: Arg, queue: deque[str], path: str) -> str:
        if queue:
            return queue.popleft()
        raise self._error(
            f"a value is required for '{arg._display}' but none was supplied", path
        )

    def _take_long(
        self, body: str, queue: deque[str], values: dict[str, object], path: str
    ) -> None:
        name, eq, inline = body.partition("=")
        if name == "help" and not eq:
            raise UsageError(self._help(path), None)
        if name == "version" and self.version is not None and not eq:
            raise UsageError(self._version_text(), None)
        arg = next((a for a in self.arguments if a.long == name), None)
        if arg is None:
            raise self._error(f"unexpected argument '--{name}' found", path)
        if arg.action.takes_value:
            raw = inline if eq else self._value_for(arg, queue, path)
            self._store(arg, raw, values, path)
        elif eq:
            raise self._error(
                f"unexpected value '{inline}' for '--{name}' found; no more were expected",
                path,
            )
        else:
            self._flag(arg, values, path)

    def _take_short(
        self, body: str, queue: deque[str], values: dict[str, object], path: str
    ) -> None:
        for offset, letter in enumerate(body):
            if letter == "h":
                raise UsageError(self._help(path), None)
            if letter == "V" and self.version is not None:
                raise UsageError(self._version_text(), None)
            arg = next((a for a in self.arguments if a.short == letter), None)
            if arg is None:
                raise self._error(f"unexpected argument '-{letter}' found", path)
            if arg.action.takes_value:
                rest = body[offset + 1 :]
                rest = rest[1:] if rest.startswith("=") else rest
                raw = rest if rest else self._value_for(arg, queue, path)
                self._store(arg, raw, values, path)
                return
            self._flag(arg, values, path)

    def _raise_help_for(self, names: list[str], path: str) -> None:
        target, target_path = self, path
        for name in names:
            sub = target.find_subcommand(name)
            if sub is None:
                raise self._error(f"unrecognized subcommand '{name}'", path)
            target, target_path = sub, f"{target_path} {sub.name}"
        raise UsageError(target._help(target_path), None)

    # rendering

    def _version_text(self) -> str:
        return f"{self.name} {self.version}"

    def _usage(self, path: str) -> str:
        parts = [path]
        options = [a for a in self.arguments if not a.is_positional()]
        if any(not a.required for a in options):
            parts.append("[OPTIONS]")
        parts.extend(a._display for a in options if a.required)
        for arg in self.arguments:
            if arg.is_positional():
                parts.append(arg._help_left)
        if self.subcommands:
            parts.append("[COMMAND]")
        return "Usage: " + " ".join(parts)

    def _help(self, path: str) -> str:
        command_rows = [(c.name, c.about or "") for c in self.subcommands]
        if command_rows and self.find_subcommand("help") is None:
            command_rows.append(("help", _HELP_SUBCOMMAND_TEXT))
        argument_rows = [
            (a._help_left, a._help_right) for a in self.arguments if a.is_positional()
        ]
        option_rows = [
            (a._help_left, a._help_right) for a in self.arguments if not a.is_positional()
        ]
        option_rows.append(("-h, --help", "Print help"))
        if self.version is not None:
            option_rows.append(("-V, --version", "Print version"))

        sections = [
            ("Commands:", command_rows),
            ("Arguments:", argument_rows),
            ("Options:", option_rows),
        ]
        width = max(len(left) for _, rows in sections for left, _ in rows)

        lines: list[str] = []
        if self.about:
            lines.extend([self.about, ""])
        lines.append(self._usage(path))
        for title, rows in sections:
            if not rows:
                continue
            lines.extend(["", title])
            lines.extend(f"  {left.ljust(width)}  {right}".rstrip() for left, right in rows)
        if self.after_help:
            lines.extend(["", self.after_help])
        return "\n".join(lines)