"""ANSI helpers for colouring prompt text."""

from __future__ import annotations

_RESET = "\x1b[0m"
_BOLD = "1"
_GREEN = "32"
_YELLOW = "33"


def _paint(text: str, *codes: str) -> str:
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def paint_green_bold(text: str) -> str:
    """Return text wrapped in bold green ANSI escapes."""
    return _paint(text, _BOLD, _GREEN)


def paint_yellow_bold(text: str) -> str:
    """Return text wrapped in bold yellow ANSI escapes."""
    return _paint(text, _BOLD, _YELLOW)