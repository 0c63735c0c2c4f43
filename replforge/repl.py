"""The interactive read-eval-print loop and its builder interface."""

from __future__ import annotations

import queue
import re
import sys
import threading
from contextlib import contextmanager
from itertools import islice
from pathlib import Path
from typing import (
    Any,
    Awaitable,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    TextIO,
)

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings as _PtkKeyBindings
from prompt_toolkit.lexers import Lexer
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import CompleteStyle
from prompt_toolkit.styles import Style

from .cli import ArgMatches, Command, UsageError
from .command import AsyncCallback, Callback, ReplCommand
from .completer import ReplCompleter
from .errors import UnknownCommand
from .keybindings import (
    Edit,
    EditCommand,
    Event,
    ExecuteHostCommand,
    KeyCode,
    KeyModifiers,
    Keybindings,
    Menu,
    default_emacs_keybindings,
)
from .prompt import ReplPrompt
from .style import paint_green_bold, paint_yellow_bold

AfterCommandCallback = Callable[[Any], Optional[str]]
AsyncAfterCommandCallback = Callable[[Any], Awaitable[Optional[str]]]
ErrorHandler = Callable[[BaseException, "Repl"], None]

_COMPLETION_MENU = "completion_menu"
_EXTERNAL_PRINTER_CAPACITY = 2048
_DEFAULT_HINTER_STYLE = "italic ansigray"
_WORD_PATTERN = re.compile(r'("[^"\n]+"|\S+)')
_HELP_MARKER = "Commands:"


def parse_line(line: str) -> list[str]:
    """Split an input line into words; double quotes group words and are removed."""
    return [word.replace('"', "") for word in _WORD_PATTERN.findall(line)]


def _default_error_handler(error: BaseException, repl: Repl) -> None:
    print(error, file=sys.stderr)


class _ExternalPrinter:
    """Queues messages to be printed above the prompt while the REPL runs."""

    def __init__(self, capacity: int = _EXTERNAL_PRINTER_CAPACITY) -> None:
        self._queue: queue.Queue[str] = queue.Queue(maxsize=capacity)

    def print(self, message: str) -> None:
        """Queue a message for printing."""
        self._queue.put(str(message))

    def drain(self) -> Iterator[str]:
        """Yield and remove every message queued so far."""
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def _next(self, timeout: float) -> str | None:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class _CappedFileHistory(FileHistory):
    """File-backed history that only loads the most recent entries."""

    def __init__(self, filename: Path, capacity: int) -> None:
        super().__init__(str(filename))
        self._capacity = capacity

    def load_history_strings(self) -> Iterable[str]:
        return list(islice(super().load_history_strings(), self._capacity))


class _PromptCompleter(Completer):
    def __init__(self, completer: ReplCompleter) -> None:
        self._completer = completer

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterator[Completion]:
        pos = document.cursor_position
        for suggestion in self._completer.complete(document.text, pos):
            start = max(-pos, min(0, suggestion.span.start - pos))
            text = suggestion.value + (" " if suggestion.append_whitespace else "")
            yield Completion(
                text,
                start_position=start,
                display=suggestion.value,
                display_meta=suggestion.description or "",
            )


class _CommandLexer(Lexer):
    """Highlights a known command name at the start of the line."""

    def __init__(self, commands: Iterable[str]) -> None:
        self._commands = frozenset(commands)

    def lex_document(self, document: Document) -> Callable[[int], list[tuple[str, str]]]:
        lines = document.lines

        def get_line(number: int) -> list[tuple[str, str]]:
            line = lines[number] if number < len(lines) else ""
            stripped = line.lstrip(" ")
            word = stripped.split(" ", 1)[0]
            if number == 0 and word in self._commands:
                lead = len(line) - len(stripped)
                return [
                    ("", line[:lead]),
                    ("ansigreen", word),
                    ("", stripped[len(word):]),
                ]
            return [("", line)]

        return get_line


_SPECIAL_KEY_NAMES = {
    "Backspace": "backspace",
    "Enter": "enter",
    "Left": "left",
    "Right": "right",
    "Up": "up",
    "Down": "down",
    "Home": "home",
    "End": "end",
    "PageUp": "pageup",
    "PageDown": "pagedown",
    "Tab": "tab",
    "BackTab": "s-tab",
    "Delete": "delete",
    "Insert": "insert",
    "Esc": "escape",
}


def _key_sequence(modifier: KeyModifiers, key_code: KeyCode) -> tuple[str, ...]:
    control = KeyModifiers.CONTROL in modifier
    shift = KeyModifiers.SHIFT in modifier
    if key_code.is_char:
        if control:
            base = f"c-{key_code.key.lower()}"
        elif shift:
            base = key_code.key.upper()
        else:
            base = key_code.key
    else:
        name = _SPECIAL_KEY_NAMES[key_code.key]
        if control and shift:
            base = f"c-s-{name}"
        elif control:
            base = f"c-{name}"
        elif shift and not name.startswith("s-"):
            base = f"s-{name}"
        else:
            base = name
    return ("escape", base) if KeyModifiers.ALT in modifier else (base,)


def _apply_edit(event: Any, command: EditCommand) -> None:
    buffer = event.current_buffer
    document = buffer.document
    ec = EditCommand
    if command is ec.MOVE_TO_START:
        buffer.cursor_position = 0
    elif command is ec.MOVE_TO_END:
        buffer.cursor_position = len(buffer.text)
    elif command is ec.MOVE_TO_LINE_START:
        buffer.cursor_position += document.get_start_of_line_position()
    elif command is ec.MOVE_TO_LINE_END:
        buffer.cursor_position += document.get_end_of_line_position()
    elif command is ec.MOVE_LEFT:
        buffer.cursor_position += document.get_cursor_left_position()
    elif command is ec.MOVE_RIGHT:
        buffer.cursor_position += document.get_cursor_right_position()
    elif command is ec.MOVE_WORD_LEFT:
        buffer.cursor_position += document.find_previous_word_beginning() or 0
    elif command is ec.MOVE_WORD_RIGHT:
        buffer.cursor_position += document.find_next_word_ending() or 0
    elif command is ec.BACKSPACE:
        buffer.delete_before_cursor(1)
    elif command is ec.DELETE:
        buffer.delete(1)
    elif command is ec.CUT_WORD_LEFT:
        count = -(document.find_previous_word_beginning() or 0)
        if count:
            event.app.clipboard.set_text(buffer.delete_before_cursor(count))
    elif command is ec.CUT_WORD_RIGHT:
        count = document.find_next_word_ending() or 0
        if count:
            event.app.clipboard.set_text(buffer.delete(count))
    elif command is ec.CUT_TO_LINE_END:
        count = document.get_end_of_line_position()
        if count:
            event.app.clipboard.set_text(buffer.delete(count))
    elif command is ec.CUT_FROM_START:
        count = -document.get_start_of_line_position()
        if count:
            event.app.clipboard.set_text(buffer.delete_before_cursor(count))
    elif command is ec.PASTE_CUT_BUFFER_BEFORE:
        buffer.paste_clipboard_data(event.app.clipboard.get_data())
    elif command is ec.UNDO:
        buffer.undo()
    elif command is ec.REDO:
        buffer.redo()
    elif command is ec.SWAP_GRAPHEMES:
        buffer.swap_characters_before_cursor()
    elif command in (ec.UPPERCASE_WORD, ec.LOWERCASE_WORD):
        word = document.text_after_cursor[: document.find_next_word_ending() or 0]
        changed = word.upper() if command is ec.UPPERCASE_WORD else word.lower()
        buffer.insert_text(changed, overwrite=True)
    elif command is ec.CAPITALIZE_CHAR:
        buffer.insert_text(document.text_after_cursor[:1].upper(), overwrite=True)
    elif command is ec.CLEAR:
        buffer.text = ""


class Repl:
    """A configurable REPL dispatching input lines to registered commands."""

    def __init__(self, context: Any) -> None:
        self.name = "repl"
        self.banner: str | None = None
        self.version = ""
        self.description = ""
        self.context = context
        self.prompt = ReplPrompt(paint_green_bold(f"{self.name}> "))
        self._commands: dict[str, ReplCommand] = {}
        self._after_command: AfterCommandCallback | None = None
        self._after_command_async: AsyncAfterCommandCallback | None = None
        self._history: Path | None = None
        self._history_capacity: int | None = None
        self._keybindings = default_emacs_keybindings()
        self._keybindings.add_binding(KeyModifiers.NONE, KeyCode("Tab"), Menu(_COMPLETION_MENU))
        self._external_printer = _ExternalPrinter()
        self._hinter_style = _DEFAULT_HINTER_STYLE
        self._hinter_enabled = True
        self._quick_completions = True
        self._partial_completions = False
        self._stop_on_ctrl_c = False
        self._stop_on_ctrl_d = True
        self._error_handler: ErrorHandler = _default_error_handler

    # configuration

    def with_name(self, name: str) -> Repl:
        """Set the name shown in help; it also becomes the prompt."""
        self.name = name
        return self.with_formatted_prompt(name)

    def with_banner(self, banner: str) -> Repl:
        """Set a banner printed when the REPL starts."""
        self.banner = banner
        return self

    def with_version(self, version: str) -> Repl:
        """Set the version shown in help."""
        self.version = version
        return self

    def with_description(self, description: str) -> Repl:
        """Set the description shown in help."""
        self.description = description
        return self

    def with_on_after_command(self, callback: AfterCommandCallback) -> Repl:
        """Call ``callback(context)`` after each command; a returned string becomes the prompt."""
        self._after_command = callback
        return self

    def with_on_after_command_async(self, callback: AsyncAfterCommandCallback) -> Repl:
        """Asynchronous variant of :meth:`with_on_after_command`."""
        self._after_command_async = callback
        return self

    def with_history(self, history_path: str | Path, capacity: int) -> Repl:
        """Keep input history in a file, loading at most ``capacity`` entries."""
        self._history = Path(history_path)
        self._history_capacity = capacity
        return self

    def with_prompt(self, prompt: str) -> Repl:
        """Use the given text as the prompt."""
        self.prompt.prefix = prompt
        return self

    def with_formatted_prompt(self, prompt: str) -> Repl:
        """Use the given text as the prompt."""
        self.prompt.prefix = prompt
        return self

    def with_error_handler(self, handler: ErrorHandler) -> Repl:
        """Replace the handler called with errors raised by commands."""
        self._error_handler = handler
        return self

    def with_stop_on_ctrl_c(self, stop_on_ctrl_c: bool) -> Repl:
        """Whether Ctrl+C ends the loop (default: no)."""
        self._stop_on_ctrl_c = stop_on_ctrl_c
        return self

    def with_stop_on_ctrl_d(self, stop_on_ctrl_d: bool) -> Repl:
        """Whether Ctrl+D ends the loop (default: yes)."""
        self._stop_on_ctrl_d = stop_on_ctrl_d
        return self

    def with_quick_completions(self, quick_completions: bool) -> Repl:
        """Apply a completion at once when it is the only candidate."""
        self._quick_completions = quick_completions
        return self

    def with_partial_completions(self, partial_completions: bool) -> Repl:
        """Insert the common prefix of all candidates when completing."""
        self._partial_completions = partial_completions
        return self

    def with_hinter_style(self, style: str) -> Repl:
        """Set the style of history suggestions."""
        self._hinter_style = style
        return self

    def with_hinter_disabled(self) -> Repl:
        """Turn off history suggestions."""
        self._hinter_enabled = False
        return self

    def with_keybinding(self, modifier: KeyModifiers, key_code: KeyCode, event: Event) -> Repl:
        """Bind a key combination to an event."""
        self._keybindings.add_binding(modifier, key_code, event)
        return self

    def find_keybinding(self, modifier: KeyModifiers, key_code: KeyCode) -> Event | None:
        """Return the event bound to a key combination, if any."""
        return self._keybindings.find_binding(modifier, key_code)

    def get_keybindings(self) -> dict[tuple[KeyModifiers, KeyCode], Event]:
        """Return a copy of every binding."""
        return dict(self._keybindings.items())

    def without_keybinding(self, modifier: KeyModifiers, key_code: KeyCode) -> Repl:
        """Remove the binding of a key combination."""
        self._keybindings.remove_binding(modifier, key_code)
        return self

    def external_printer(self) -> _ExternalPrinter:
        """Return a printer that other threads can use to print above the prompt."""
        return self._external_printer

    def with_command(self, command: Command, callback: Callback) -> Repl:
        """Register a command with a synchronous handler."""
        self._commands[command.name] = ReplCommand(command.name, command, callback=callback)
        return self

    def with_command_async(self, command: Command, callback: AsyncCallback) -> Repl:
        """Register a command with an asynchronous handler."""
        self._commands[command.name] = ReplCommand(
            command.name, command, async_callback=callback
        )
        return self

    def _adopt(self, app: Command) -> None:
        self.with_name(app.name)
        if app.version is not None:
            self.with_version(app.version)
        if app.about is not None:
            self.with_description(app.about)

    def with_derived(self, app: Command, callbacks: Mapping[str, Callback]) -> Repl:
        """Take name, version, description and the subcommands that have handlers from ``app``."""
        self._adopt(app)
        for sub in app.subcommands:
            if sub.name in callbacks:
                self.with_command(sub, callbacks[sub.name])
        return self

    def with_async_derived(self, app: Command, callbacks: Mapping[str, AsyncCallback]) -> Repl:
        """Like :meth:`with_derived`, with asynchronous handlers."""
        self._adopt(app)
        for sub in app.subcommands:
            if sub.name in callbacks:
                self.with_command_async(sub, callbacks[sub.name])
        return self

    # help

    def help_text(self, args: Iterable[str] = ()) -> str:
        """Return the overall help, or the help of the command named first in ``args``."""
        names = list(args)
        if names:
            definition = self._commands.get(names[0])
            if definition is None:
                raise UnknownCommand(names[0])
            return definition.command.render_help()
        app = Command("app")
        for name in sorted(self._commands):
            app.subcommand(self._commands[name].command)
        text = app.render_help()
        marker = text.find(_HELP_MARKER)
        if marker != -1:
            text = paint_yellow_bold("COMMANDS:") + text[marker + len(_HELP_MARKER):]
        header = f"{paint_green_bold(self.name)} {self.version}\n{self.description}\n"
        return f"{header}\n{text}"

    def _show_help(self, args: list[str]) -> None:
        try:
            print(self.help_text(args))
        except UnknownCommand:
            print(f"Help not found for command '{args[0]}'", file=sys.stderr)

    # dispatch

    def _builtin(self, command: str, args: list[str]) -> None:
        if command == "help":
            self._show_help(args)
        else:
            raise UnknownCommand(command)

    @staticmethod
    def _matches(definition: ReplCommand, command: str, args: list[str]) -> ArgMatches | None:
        try:
            return definition.command.parse([command, *args])
        except UsageError as err:
            print(err, file=sys.stdout if err.is_help else sys.stderr)
            return None

    def _after_command_result(self, produce: Callable[[], Optional[str]]) -> None:
        try:
            new_prompt = produce()
        except Exception as err:  # noqa: BLE001 - reported, not fatal
            print(f"failed to execute after_command_callback {err!r}", file=sys.stderr)
            return
        if new_prompt is not None:
            self.prompt.prefix = new_prompt

    def _run_after_command(self) -> None:
        callback = self._after_command
        if callback is not None:
            self._after_command_result(lambda: callback(self.context))

    async def _run_after_command_async(self) -> None:
        self._run_after_command()
        callback = self._after_command_async
        if callback is None:
            return
        try:
            new_prompt = await callback(self.context)
        except Exception as err:  # noqa: BLE001 - reported, not fatal
            print(f"failed to execute after_command_callback {err!r}", file=sys.stderr)
            return
        if new_prompt is not None:
            self.prompt.prefix = new_prompt

    def process_argv(self, argv: Iterable[str]) -> None:
        """Run one command given as a list of words; the first word names the command."""
        words = list(argv)
        if not words:
            return
        command, *args = words
        definition = self._commands.get(command)
        if definition is None:
            self._builtin(command, args)
            return
        if definition.callback is None:
            raise TypeError(f"command '{command}' is asynchronous; use process_argv_async")
        matches = self._matches(definition, command, args)
        if matches is not None:
            result = definition.callback(matches, self.context)
            if result is not None:
                print(result)
        self._run_after_command()

    async def process_argv_async(self, argv: Iterable[str]) -> None:
        """Asynchronous variant of :meth:`process_argv`; runs both kinds of handler."""
        words = list(argv)
        if not words:
            return
        command, *args = words
        definition = self._commands.get(command)
        if definition is None:
            self._builtin(command, args)
            return
        matches = self._matches(definition, command, args)
        if matches is not None:
            if definition.async_callback is not None:
                result = await definition.async_callback(matches, self.context)
            else:
                assert definition.callback is not None
                result = definition.callback(matches, self.context)
            if result is not None:
                print(result)
        await self._run_after_command_async()

    def process_line(self, line: str) -> None:
        """Split a line into words and run it as a command."""
        self.process_argv(parse_line(line))

    async def process_line_async(self, line: str) -> None:
        """Asynchronous variant of :meth:`process_line`."""
        await self.process_argv_async(parse_line(line))

    def run_with_reader(self, reader: TextIO | Iterable[str]) -> None:
        """Run every line of a text stream as a command, passing errors to the handler."""
        for raw in reader:
            line = raw[:-1] if raw.endswith("\n") else raw
            line = line[:-1] if line.endswith("\r") else line
            try:
                self.process_line(line)
            except Exception as err:  # noqa: BLE001 - handed to the error handler
                self._error_handler(err, self)

    # interactive loop

    def _menu_handler(self) -> Callable[[Any], None]:
        quick, partial = self._quick_completions, self._partial_completions

        def handler(event: Any) -> None:
            buffer = event.current_buffer
            if buffer.complete_state:
                buffer.complete_next()
                return
            if quick and buffer.completer is not None:
                found = list(
                    buffer.completer.get_completions(
                        buffer.document, CompleteEvent(completion_requested=True)
                    )
                )
                if len(found) == 1:
                    buffer.apply_completion(found[0])
                    return
            buffer.start_completion(insert_common_part=partial)

        return handler

    def _handler_for(self, event_spec: Event) -> Callable[[Any], None] | None:
        if isinstance(event_spec, ExecuteHostCommand):
            line = event_spec.command

            def execute(event: Any) -> None:
                buffer = event.current_buffer
                buffer.text = line
                buffer.validate_and_handle()

            return execute
        if isinstance(event_spec, Edit):
            commands = event_spec.commands

            def edit(event: Any) -> None:
                for command in commands:
                    _apply_edit(event, command)

            return edit
        if isinstance(event_spec, Menu) and event_spec.name == _COMPLETION_MENU:
            return self._menu_handler()
        return None

    def _build_key_bindings(self) -> _PtkKeyBindings:
        bindings = _PtkKeyBindings()
        for (modifier, key_code), event_spec in self._keybindings.items():
            handler = self._handler_for(event_spec)
            if handler is None:
                continue
            try:
                bindings.add(*_key_sequence(modifier, key_code))(handler)
            except ValueError:
                continue
        return bindings

    def _build_session(self) -> PromptSession:
        valid_commands = [*self._commands, "help"]
        if self._history is not None:
            history = _CappedFileHistory(self._history, self._history_capacity or 0)
        else:
            history = InMemoryHistory()
        return PromptSession(
            history=history,
            completer=_PromptCompleter(ReplCompleter(self._commands)),
            complete_while_typing=False,
            complete_style=CompleteStyle.COLUMN,
            lexer=_CommandLexer(valid_commands),
            auto_suggest=AutoSuggestFromHistory() if self._hinter_enabled else None,
            style=Style.from_dict({"auto-suggestion": self._hinter_style}),
            key_bindings=self._build_key_bindings(),
        )

    def _prompt_message(self) -> ANSI:
        return ANSI(self.prompt.render() + self.prompt.indicator())

    @contextmanager
    def _external_output(self) -> Iterator[None]:
        stop = threading.Event()

        def pump() -> None:
            while not stop.is_set():
                message = self._external_printer._next(0.1)
                if message is not None:
                    print(message)

        with patch_stdout():
            worker = threading.Thread(target=pump, daemon=True)
            worker.start()
            try:
                yield
            finally:
                stop.set()
                worker.join()

    def _should_stop(self, signal: BaseException) -> bool:
        if isinstance(signal, KeyboardInterrupt):
            return self._stop_on_ctrl_c
        return self._stop_on_ctrl_d

    def run(self) -> None:
        """Read and run lines from the terminal until stopped."""
        if self.banner is not None:
            print(self.banner)
        session = self._build_session()
        with self._external_output():
            while True:
                try:
                    line = session.prompt(self._prompt_message())
                except (KeyboardInterrupt, EOFError) as signal:
                    if self._should_stop(signal):
                        break
                    continue
                try:
                    self.process_line(line)
                except Exception as err:  # noqa: BLE001 - handed to the error handler
                    self._error_handler(err, self)

    async def run_async(self) -> None:
        """Asynchronous variant of :meth:`run`."""
        if self.banner is not None:
            print(self.banner)
        session = self._build_session()
        with self._external_output():
            while True:
                try:
                    line = await session.prompt_async(self._prompt_message())
                except (KeyboardInterrupt, EOFError) as signal:
                    if self._should_stop(signal):
                        break
                    continue
                try:
                    await self.process_line_async(line)
                except Exception as err:  # noqa: BLE001 - handed to the error handler
                    self._error_handler(err, self)