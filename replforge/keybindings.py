"""Key bindings mapping key presses to line-editor events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag
from typing import Iterable, Union


class KeyModifiers(Flag):
    """Modifier keys held together with a key."""

    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4


_SPECIAL_KEYS = frozenset(
    {
        "Backspace",
        "Enter",
        "Left",
        "Right",
        "Up",
        "Down",
        "Home",
        "End",
        "PageUp",
        "PageDown",
        "Tab",
        "BackTab",
        "Delete",
        "Insert",
        "Esc",
    }
)


@dataclass(frozen=True)
class KeyCode:
    """A key: either a single character or a named special key."""

    key: str

    def __post_init__(self) -> None:
        if len(self.key) != 1 and self.key not in _SPECIAL_KEYS:
            raise ValueError(f"unknown key {self.key!r}")

    @classmethod
    def char(cls, character: str) -> KeyCode:
        """Return the key code of a single character."""
        if len(character) != 1:
            raise ValueError(f"expected one character, got {character!r}")
        return cls(character)

    @property
    def is_char(self) -> bool:
        return len(self.key) == 1

    def __repr__(self) -> str:
        return f"Char({self.key!r})" if self.is_char else self.key


KeyCode.BACKSPACE = KeyCode("Backspace")  # type: ignore[attr-defined]
KeyCode.ENTER = KeyCode("Enter")  # type: ignore[attr-defined]
KeyCode.LEFT = KeyCode("Left")  # type: ignore[attr-defined]
KeyCode.RIGHT = KeyCode("Right")  # type: ignore[attr-defined]
KeyCode.UP = KeyCode("Up")  # type: ignore[attr-defined]
KeyCode.DOWN = KeyCode("Down")  # type: ignore[attr-defined]
KeyCode.HOME = KeyCode("Home")  # type: ignore[attr-defined]
KeyCode.END = KeyCode("End")  # type: ignore[attr-defined]
KeyCode.PAGE_UP = KeyCode("PageUp")  # type: ignore[attr-defined]
KeyCode.PAGE_DOWN = KeyCode("PageDown")  # type: ignore[attr-defined]
KeyCode.TAB = KeyCode("Tab")  # type: ignore[attr-defined]
KeyCode.BACK_TAB = KeyCode("BackTab")  # type: ignore[attr-defined]
KeyCode.DELETE = KeyCode("Delete")  # type: ignore[attr-defined]
KeyCode.INSERT = KeyCode("Insert")  # type: ignore[attr-defined]
KeyCode.ESC = KeyCode("Esc")  # type: ignore[attr-defined]


class EditCommand(Enum):
    """An editing operation on the input buffer."""

    MOVE_TO_START = "MoveToStart"
    MOVE_TO_END = "MoveToEnd"
    MOVE_TO_LINE_START = "MoveToLineStart"
    MOVE_TO_LINE_END = "MoveToLineEnd"
    MOVE_LEFT = "MoveLeft"
    MOVE_RIGHT = "MoveRight"
    MOVE_WORD_LEFT = "MoveWordLeft"
    MOVE_WORD_RIGHT = "MoveWordRight"
    BACKSPACE = "Backspace"
    DELETE = "Delete"
    CUT_WORD_LEFT = "CutWordLeft"
    CUT_WORD_RIGHT = "CutWordRight"
    CUT_TO_LINE_END = "CutToLineEnd"
    CUT_FROM_START = "CutFromStart"
    PASTE_CUT_BUFFER_BEFORE = "PasteCutBufferBefore"
    UNDO = "Undo"
    REDO = "Redo"
    SWAP_GRAPHEMES = "SwapGraphemes"
    UPPERCASE_WORD = "UppercaseWord"
    LOWERCASE_WORD = "LowercaseWord"
    CAPITALIZE_CHAR = "CapitalizeChar"
    CLEAR = "Clear"


@dataclass(frozen=True)
class ExecuteHostCommand:
    """Run the given line as if the user had typed it."""

    command: str


@dataclass(frozen=True)
class Edit:
    """Apply editing commands to the buffer, in order."""

    commands: tuple[EditCommand, ...]

    def __post_init__(self) -> None:
        commands = tuple(self.commands)
        for command in commands:
            if not isinstance(command, EditCommand):
                raise TypeError(f"not an edit command: {command!r}")
        object.__setattr__(self, "commands", commands)


@dataclass(frozen=True)
class Menu:
    """Open the menu of the given name."""

    name: str


Event = Union[ExecuteHostCommand, Edit, Menu]
_EVENT_TYPES = (ExecuteHostCommand, Edit, Menu)
Binding = tuple[KeyModifiers, KeyCode]


class Keybindings:
    """A table from (modifier, key) to event."""

    def __init__(self, bindings: Iterable[tuple[Binding, Event]] = ()) -> None:
        self._bindings: dict[Binding, Event] = {}
        for (modifier, key_code), event in bindings:
            self.add_binding(modifier, key_code, event)

    def add_binding(self, modifier: KeyModifiers, key_code: KeyCode, event: Event) -> None:
        """Bind the key combination to the event, replacing any earlier binding."""
        if not isinstance(modifier, KeyModifiers):
            raise TypeError(f"not a key modifier: {modifier!r}")
        if not isinstance(key_code, KeyCode):
            raise TypeError(f"not a key code: {key_code!r}")
        if not isinstance(event, _EVENT_TYPES):
            raise TypeError(f"not an event: {event!r}")
        self._bindings[(modifier, key_code)] = event

    def find_binding(self, modifier: KeyModifiers, key_code: KeyCode) -> Event | None:
        """Return the event bound to the combination, if any."""
        return self._bindings.get((modifier, key_code))

    def remove_binding(self, modifier: KeyModifiers, key_code: KeyCode) -> Event | None:
        """Unbind the combination and return the event it was bound to."""
        return self._bindings.pop((modifier, key_code), None)

    def items(self) -> list[tuple[Binding, Event]]:
        """Return all bindings as ((modifier, key), event) pairs."""
        return list(self._bindings.items())

    def copy(self) -> Keybindings:
        return Keybindings(self.items())

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, combination: object) -> bool:
        return combination in self._bindings


def _edit(*commands: EditCommand) -> Edit:
    return Edit(commands)


def default_emacs_keybindings() -> Keybindings:
    """Return a fresh table of Emacs-style editing bindings."""
    ec, km, char = EditCommand, KeyModifiers, KeyCode.char
    table: list[tuple[Binding, Event]] = [
        ((km.NONE, KeyCode("Left")), _edit(ec.MOVE_LEFT)),
        ((km.NONE, KeyCode("Right")), _edit(ec.MOVE_RIGHT)),
        ((km.NONE, KeyCode("Home")), _edit(ec.MOVE_TO_LINE_START)),
        ((km.NONE, KeyCode("End")), _edit(ec.MOVE_TO_LINE_END)),
        ((km.NONE, KeyCode("Backspace")), _edit(ec.BACKSPACE)),
        ((km.NONE, KeyCode("Delete")), _edit(ec.DELETE)),
        ((km.CONTROL, KeyCode("Left")), _edit(ec.MOVE_WORD_LEFT)),
        ((km.CONTROL, KeyCode("Right")), _edit(ec.MOVE_WORD_RIGHT)),
        ((km.CONTROL, KeyCode("Backspace")), _edit(ec.CUT_WORD_LEFT)),
        ((km.CONTROL, char("a")), _edit(ec.MOVE_TO_LINE_START)),
        ((km.CONTROL, char("e")), _edit(ec.MOVE_TO_LINE_END)),
        ((km.CONTROL, char("b")), _edit(ec.MOVE_LEFT)),
        ((km.CONTROL, char("f")), _edit(ec.MOVE_RIGHT)),
        ((km.CONTROL, char("g")), _edit(ec.REDO)),
        ((km.CONTROL, char("z")), _edit(ec.UNDO)),
        ((km.CONTROL, char("y")), _edit(ec.PASTE_CUT_BUFFER_BEFORE)),
        ((km.CONTROL, char("w")), _edit(ec.CUT_WORD_LEFT)),
        ((km.CONTROL, char("k")), _edit(ec.CUT_TO_LINE_END)),
        ((km.CONTROL, char("u")), _edit(ec.CUT_FROM_START)),
        ((km.CONTROL, char("t")), _edit(ec.SWAP_GRAPHEMES)),
        ((km.CONTROL, char("h")), _edit(ec.BACKSPACE)),
        ((km.ALT, char("b")), _edit(ec.MOVE_WORD_LEFT)),
        ((km.ALT, char("f")), _edit(ec.MOVE_WORD_RIGHT)),
        ((km.ALT, char("d")), _edit(ec.CUT_WORD_RIGHT)),
        ((km.ALT, char("u")), _edit(ec.UPPERCASE_WORD)),
        ((km.ALT, char("l")), _edit(ec.LOWERCASE_WORD)),
        ((km.ALT, char("c")), _edit(ec.CAPITALIZE_CHAR)),
        ((km.ALT, KeyCode("Backspace")), _edit(ec.CUT_WORD_LEFT)),
    ]
    return Keybindings(table)