import pytest

from replforge.errors import (
    IllegalDefaultError,
    IllegalRequiredError,
    MissingRequiredArgument,
    ParseBoolError,
    ParseFloatError,
    ParseIntError,
    ReplError,
    TooManyArguments,
    UnknownCommand,
)


def test_unknown_command_message():
    assert str(UnknownCommand("foo")) == "Error: Unknown command 'foo'"


def test_missing_required_argument_message():
    err = MissingRequiredArgument("hello", "who")
    assert str(err) == "Error: Missing required argument 'who' for command 'hello'"
    assert (err.command, err.parameter) == ("hello", "who")


def test_too_many_arguments_message():
    err = TooManyArguments("add", 2)
    assert str(err) == "Error: Command 'add' can have no more than 2 arguments"
    assert err.nargs == 2


def test_illegal_parameter_messages():
    assert str(IllegalDefaultError("x")) == "Error: Parameter 'x' cannot have a default"
    assert str(IllegalRequiredError("x")) == "Error: Parameter 'x' cannot be required"


@pytest.mark.parametrize("cls", [ParseBoolError, ParseIntError, ParseFloatError])
def test_parse_errors_prefix_message(cls):
    err = cls("invalid digit found in string")
    assert str(err) == "Error: invalid digit found in string"
    assert err.message == "invalid digit found in string"
    assert isinstance(err, ValueError)


def test_parse_error_caught_as_repl_error():
    with pytest.raises(ReplError) as info:
        raise ParseIntError("bad")
    assert info.value == ParseIntError("bad")


def test_equality_and_hash():
    assert UnknownCommand("a") == UnknownCommand("a")
    assert hash(UnknownCommand("a")) == hash(UnknownCommand("a"))
    assert UnknownCommand("a") != UnknownCommand("b")
    assert IllegalDefaultError("x") != IllegalRequiredError("x")
    assert len({UnknownCommand("a"), UnknownCommand("a"), UnknownCommand("b")}) == 2