"""Ready-made example REPLs and a command that starts one of them."""

from __future__ import annotations

import asyncio
import re
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .cli import Arg, ArgAction, ArgMatches, Command
from .errors import ParseIntError, ReplError
from .keybindings import Edit, EditCommand, ExecuteHostCommand, KeyCode, KeyModifiers
from .repl import Repl

_APP_NAME = "MyApp"
_APP_VERSION = "v0.1.0"
_APP_DESCRIPTION = "My very cool app"
_LIST_NAME = "MyList"
_LIST_DESCRIPTION = "My very cool List"
_BANNER = "Welcome to MyApp"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


@dataclass
class ListContext:
    """State of the list example: the names entered so far."""

    items: deque[str] = field(default_factory=deque)

    def joined(self) -> str:
        return ", ".join(self.items)


class CustomError(Exception):
    """An application error that either wraps a REPL error or carries a message."""

    def __init__(self, message: str, repl_error: ReplError | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.repl_error = repl_error

    @classmethod
    def from_repl_error(cls, error: ReplError) -> CustomError:
        """Wrap an error reported by the REPL itself."""
        return cls(str(error), error)

    def __str__(self) -> str:
        if self.repl_error is not None:
            return f"REPL Error: {self.repl_error}"
        return f"String Error: {self.message}"


# handlers


def _hello(args: ArgMatches, context: Any) -> str:
    return f"Hello, {args.get_one('who')}"


def _parse_i32(text: str) -> int:
    if not text:
        raise ParseIntError("cannot parse integer from empty string")
    if not _INT_PATTERN.fullmatch(text):
        raise ParseIntError("invalid digit found in string")
    value = int(text)
    if value > _I32_MAX:
        raise ParseIntError("number too large to fit in target type")
    if value < _I32_MIN:
        raise ParseIntError("number too small to fit in target type")
    return value


def _add(args: ArgMatches, context: Any) -> str:
    first = _parse_i32(str(args.get_one("first")))
    second = _parse_i32(str(args.get_one("second")))
    return str(first + second)


def _append(args: ArgMatches, context: ListContext) -> str:
    context.items.append(str(args.get_one("name")))
    return context.joined()


def _prepend(args: ArgMatches, context: ListContext) -> str:
    context.items.appendleft(str(args.get_one("name")))
    return context.joined()


def _list_prompt(context: ListContext) -> str:
    return f"{_LIST_NAME} [{len(context.items)}]"


def _say(args: ArgMatches, context: Any) -> str:
    nested = args.subcommand()
    if nested is not None:
        name, sub_matches = nested
        if name == "hello":
            return f"Hello, {sub_matches.get_one('who')}"
        if name == "goodbye":
            return "Adiós!" if sub_matches.get_flag("spanish") else "Goodbye!"
    raise RuntimeError(f"Unknown subcommand {args.subcommand_name()!r}")


def _fail(args: ArgMatches, context: Any) -> str | None:
    raise CustomError("Returning an error")


def _report_custom_error(error: BaseException, repl: Repl) -> None:
    if isinstance(error, ReplError):
        error = CustomError.from_repl_error(error)
    print(error, file=sys.stderr)


async def _hello_async(args: ArgMatches, context: Any) -> str:
    return f"Hello, {args.get_one('who')}"


async def _update_prompt(context: Any) -> str:
    return "updated"


# commands


def _hello_command(about: str = "Greetings!") -> Command:
    return Command("hello", about=about).arg(Arg("who", required=True))


def _list_commands() -> list[Command]:
    return [
        Command("append", about="Append name to end of list").arg(Arg("name", required=True)),
        Command("prepend", about="Prepend name to front of list").arg(
            Arg("name", required=True)
        ),
    ]


def _app_repl(context: Any, description: str = _APP_DESCRIPTION) -> Repl:
    return (
        Repl(context)
        .with_name(_APP_NAME)
        .with_version(_APP_VERSION)
        .with_description(description)
    )


# builders


def build_hello_repl() -> Repl:
    """A REPL greeting whoever is named."""
    return (
        _app_repl(None)
        .with_banner(_BANNER)
        .with_command(_hello_command(), _hello)
    )


def build_list_repl() -> Repl:
    """A REPL keeping a list of names; the prompt shows its length."""
    append, prepend = _list_commands()
    return (
        Repl(ListContext())
        .with_name(_LIST_NAME)
        .with_version(_APP_VERSION)
        .with_description(_LIST_DESCRIPTION)
        .with_command(append, _append)
        .with_command(prepend, _prepend)
        .with_on_after_command(_list_prompt)
    )


def build_calculator_repl() -> Repl:
    """A REPL without state that adds numbers and greets."""
    add = (
        Command("add", about="Add two numbers together")
        .arg(Arg("first", required=True))
        .arg(Arg("second", required=True))
    )
    return (
        _app_repl(None)
        .with_command(add, _add)
        .with_command(_hello_command(), _hello)
    )


def build_subcommands_repl() -> Repl:
    """A REPL whose one command has subcommands."""
    say = (
        Command("say", about="Greetings!")
        .subcommand(
            Command("hello").arg(Arg("who", required=True)).arg(Arg("uppercase"))
        )
        .subcommand(
            Command("goodbye").arg(
                Arg("spanish", long="spanish", action=ArgAction.SET_TRUE)
            )
        )
    )
    return _app_repl(None).with_banner(_BANNER).with_command(say, _say)


def build_failing_repl() -> Repl:
    """A REPL whose command always fails with an application error."""
    return (
        _app_repl(None)
        .with_command(Command("hello", about="Do nothing, unsuccessfully"), _fail)
        .with_error_handler(_report_custom_error)
    )


def build_keybinding_repl() -> Repl:
    """The greeting REPL with extra key bindings."""
    return (
        build_hello_repl()
        .with_keybinding(
            KeyModifiers.CONTROL, KeyCode.char("g"), ExecuteHostCommand("hello Friend")
        )
        .with_keybinding(KeyModifiers.CONTROL, KeyCode.char("h"), ExecuteHostCommand("help"))
        .with_keybinding(
            KeyModifiers.CONTROL, KeyCode.char("u"), Edit((EditCommand.UPPERCASE_WORD,))
        )
        .with_keybinding(
            KeyModifiers.CONTROL, KeyCode.char("l"), Edit((EditCommand.LOWERCASE_WORD,))
        )
    )


def build_async_repl() -> Repl:
    """A greeting REPL with asynchronous handlers."""
    return (
        Repl(None)
        .with_name(_APP_NAME)
        .with_version(_APP_VERSION)
        .with_command_async(_hello_command(), _hello_async)
        .with_on_after_command_async(_update_prompt)
    )


def _build_derived_hello_repl() -> Repl:
    app = Command(_APP_NAME, about=_APP_DESCRIPTION, version=_APP_VERSION).subcommand(
        _hello_command(about="Greeting")
    )
    return Repl(None).with_banner(_BANNER).with_derived(app, {"hello": _hello})


def _build_derived_list_repl() -> Repl:
    app = Command(_APP_NAME, about=_LIST_DESCRIPTION, version=_APP_VERSION)
    for command in _list_commands():
        app.subcommand(command)
    return (
        Repl(ListContext())
        .with_derived(app, {"append": _append, "prepend": _prepend})
        .with_on_after_command(_list_prompt)
    )


def _describe_keybindings(repl: Repl) -> list[str]:
    bindings = repl.get_keybindings()
    order = (KeyModifiers.NONE, KeyModifiers.CONTROL, KeyModifiers.SHIFT, KeyModifiers.ALT)
    return [
        f"{modifier!r} + {key_code!r} => {event!r}"
        for wanted in order
        for (modifier, key_code), event in bindings.items()
        if modifier == wanted
    ]


_DEMOS: dict[str, Callable[[], Repl]] = {
    "hello": build_hello_repl,
    "list": build_list_repl,
    "calculator": build_calculator_repl,
    "subcommands": build_subcommands_repl,
    "failing": build_failing_repl,
    "keybindings": build_keybinding_repl,
    "async": build_async_repl,
    "derive-hello": _build_derived_hello_repl,
    "derive-list": _build_derived_list_repl,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Start the named demo; further words are run as one command instead."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in _DEMOS:
        names = ", ".join(_DEMOS)
        print(f"usage: replforge-demo <demo> [command ...]\ndemos: {names}", file=sys.stderr)
        return 2
    name, rest = args[0], args[1:]
    repl = _DEMOS[name]()
    is_async = name == "async"
    try:
        if rest:
            if is_async:
                asyncio.run(repl.process_argv_async(rest))
            else:
                repl.process_argv(rest)
            return 0
        if name == "keybindings":
            print("Keybindings:")
            for line in _describe_keybindings(repl):
                print(line)
        if is_async:
            asyncio.run(repl.run_async())
        else:
            repl.run()
    except Exception as err:  # noqa: BLE001 - reported to the user
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())