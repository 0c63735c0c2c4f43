"""Errors raised by the REPL."""

from __future__ import annotations


class ReplError(Exception):
    """Base class of every error the REPL reports."""

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.args == other.args  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class IllegalRequiredError(ReplError):
    """A parameter is marked required where that is not allowed."""

    def __init__(self, parameter: str) -> None:
        super().__init__(parameter)
        self.parameter = parameter

    def __str__(self) -> str:
        return f"Error: Parameter '{self.parameter}' cannot be required"


class IllegalDefaultError(ReplError):
    """A parameter has a default while also being required."""

    def __init__(self, parameter: str) -> None:
        super().__init__(parameter)
        self.parameter = parameter

    def __str__(self) -> str:
        return f"Error: Parameter '{self.parameter}' cannot have a default"


class MissingRequiredArgument(ReplError):
    """A required argument was not given to a command."""

    def __init__(self, command: str, parameter: str) -> None:
        super().__init__(command, parameter)
        self.command = command
        self.parameter = parameter

    def __str__(self) -> str:
        return (
            f"Error: Missing required argument '{self.parameter}' "
            f"for command '{self.command}'"
        )


class TooManyArguments(ReplError):
    """A command was given more arguments than it accepts."""

    def __init__(self, command: str, nargs: int) -> None:
        super().__init__(command, nargs)
        self.command = command
        self.nargs = nargs

    def __str__(self) -> str:
        return (
            f"Error: Command '{self.command}' can have no more than "
            f"{self.nargs} arguments"
        )


class _ParseError(ReplError, ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Error: {self.message}"


class ParseBoolError(_ParseError):
    """A value could not be read as a boolean."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ParseIntError(_ParseError):
    """A value could not be read as an integer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ParseFloatError(_ParseError):
    """A value could not be read as a float."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnknownCommand(ReplError):
    """No command of the given name is registered."""

    def __init__(self, command: str) -> None:
        super().__init__(command)
        self.command = command

    def __str__(self) -> str:
        return f"Error: Unknown command '{self.command}'"