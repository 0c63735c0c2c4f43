import pytest

from replforge.cli import Arg, ArgAction, ArgMatches, Command, PossibleValue, UsageError
from replforge.errors import IllegalDefaultError, IllegalRequiredError


def hello_command():
    return Command("hello", about="Greetings!").arg(Arg("who", required=True))


def say_command():
    return (
        Command("say", about="Greetings!")
        .subcommand(Command("hello").arg(Arg("who", required=True)).arg(Arg("uppercase")))
        .subcommand(
            Command("goodbye").arg(
                Arg("spanish", long="spanish", action=ArgAction.SET_TRUE)
            )
        )
    )


def test_positional_value():
    matches = hello_command().parse(["hello", "Friend"])
    assert matches.get_one("who") == "Friend"
    assert matches.subcommand() is None


def test_missing_required_argument():
    cmd = hello_command()
    with pytest.raises(UsageError) as info:
        cmd.parse(["hello"])
    assert info.value.is_help is False
    assert info.value.usage == cmd.usage()
    assert "<who>" in info.value.message


def test_unexpected_extra_positional():
    with pytest.raises(UsageError) as info:
        hello_command().parse(["hello", "Friend", "extra"])
    assert "'extra'" in info.value.message


def test_optional_positional_defaults_to_none():
    cmd = Command("add").arg(Arg("first", required=True)).arg(Arg("second"))
    matches = cmd.parse(["add", "1"])
    assert matches.get_one("first") == "1"
    assert matches.get_one("second") is None
    assert "second" not in matches


def test_long_option_forms_agree():
    cmd = Command("go").arg(Arg("mode", long="mode"))
    assert cmd.parse(["go", "--mode=fast"]).get_one("mode") == "fast"
    assert cmd.parse(["go", "--mode", "fast"]).get_one("mode") == "fast"


def test_short_option_attached_and_separate():
    cmd = Command("go").arg(Arg("out", short="o"))
    assert cmd.parse(["go", "-ofile"]).get_one("out") == "file"
    assert cmd.parse(["go", "-o", "file"]).get_one("out") == "file"
    assert cmd.parse(["go", "-o=file"]).get_one("out") == "file"


def test_count_cluster():
    cmd = Command("go").arg(Arg("verbose", short="v", action=ArgAction.COUNT))
    assert cmd.parse(["go", "-vvv"]).get_one("verbose") == 3
    assert cmd.parse(["go"]).get_one("verbose") == 0


def test_flags_default_and_set():
    cmd = Command("go").arg(Arg("on", long="on", action=ArgAction.SET_TRUE)).arg(
        Arg("off", long="off", action=ArgAction.SET_FALSE)
    )
    plain = cmd.parse(["go"])
    assert plain.get_flag("on") is False
    assert plain.get_flag("off") is True
    toggled = cmd.parse(["go", "--on", "--off"])
    assert toggled.get_flag("on") is True
    assert toggled.get_flag("off") is False


def test_flag_rejects_value():
    cmd = Command("go").arg(Arg("on", long="on", action=ArgAction.SET_TRUE))
    with pytest.raises(UsageError):
        cmd.parse(["go", "--on=yes"])


def test_get_flag_on_value_argument_raises():
    with pytest.raises(TypeError):
        hello_command().parse(["hello", "x"]).get_flag("who")


def test_unknown_argument_name_raises_key_error():
    matches = hello_command().parse(["hello", "x"])
    with pytest.raises(KeyError):
        matches.get_one("nobody")
    with pytest.raises(KeyError):
        matches.get_flag("nobody")


def test_unknown_options_raise():
    with pytest.raises(UsageError) as info:
        hello_command().parse(["hello", "--nope", "x"])
    assert "--nope" in info.value.message
    with pytest.raises(UsageError):
        hello_command().parse(["hello", "-z", "x"])


def test_missing_option_value():
    cmd = Command("go").arg(Arg("mode", long="mode"))
    with pytest.raises(UsageError) as info:
        cmd.parse(["go", "--mode"])
    assert "--mode <mode>" in info.value.message


def test_option_given_twice_raises():
    cmd = Command("go").arg(Arg("mode", long="mode"))
    with pytest.raises(UsageError):
        cmd.parse(["go", "--mode", "a", "--mode", "b"])


def test_append_collects_values():
    cmd = Command("go").arg(Arg("names", action=ArgAction.APPEND))
    matches = cmd.parse(["go", "a", "b"])
    assert matches["names"] == ["a", "b"]
    assert matches.get_one("names") == "a"


def test_double_dash_makes_positional():
    matches = hello_command().parse(["hello", "--", "-x"])
    assert matches.get_one("who") == "-x"


def test_default_is_applied():
    cmd = Command("go").arg(Arg("mode", long="mode", default="fast"))
    assert cmd.parse(["go"]).get_one("mode") == "fast"
    assert cmd.parse(["go", "--mode", "slow"]).get_one("mode") == "slow"


def test_choices():
    cmd = Command("go").arg(Arg("color", choices=["red", PossibleValue("blue", "Cold")]))
    assert cmd.parse(["go", "blue"]).get_one("color") == "blue"
    with pytest.raises(UsageError) as info:
        cmd.parse(["go", "green"])
    assert "'green'" in info.value.message


def test_required_with_default_is_illegal():
    with pytest.raises(IllegalDefaultError) as info:
        Arg("x", required=True, default="y")
    assert info.value.parameter == "x"


def test_required_flag_is_illegal():
    with pytest.raises(IllegalRequiredError):
        Arg("x", long="x", required=True, action=ArgAction.SET_TRUE)


def test_invalid_short_name():
    with pytest.raises(ValueError):
        Arg("x", short="xy")


def test_duplicate_argument_rejected():
    cmd = Command("go").arg(Arg("a"))
    with pytest.raises(ValueError):
        cmd.arg(Arg("a"))
    with pytest.raises(ValueError):
        Command("go").arg(Arg("a", long="same")).arg(Arg("b", long="same"))


def test_duplicate_subcommand_rejected():
    with pytest.raises(ValueError):
        Command("go").subcommand(Command("x")).subcommand(Command("x"))


def test_subcommand_matches():
    matches = say_command().parse(["say", "goodbye", "--spanish"])
    assert matches.subcommand_name() == "goodbye"
    name, sub = matches.subcommand()
    assert name == "goodbye"
    assert sub.get_flag("spanish") is True


def test_subcommand_positional():
    name, sub = say_command().parse(["say", "hello", "Friend"]).subcommand()
    assert (name, sub.get_one("who")) == ("hello", "Friend")


def test_subcommand_error_usage_includes_parent():
    with pytest.raises(UsageError) as info:
        say_command().parse(["say", "hello"])
    assert info.value.usage.startswith("Usage: say hello")


def test_no_subcommand_given():
    assert say_command().parse(["say"]).subcommand_name() is None


def test_help_flag():
    cmd = hello_command()
    for flag in ("--help", "-h"):
        with pytest.raises(UsageError) as info:
            cmd.parse(["hello", flag])
        assert info.value.is_help
        assert str(info.value) == cmd.render_help()


def test_help_subcommand_shows_nested_help():
    with pytest.raises(UsageError) as info:
        say_command().parse(["say", "help", "hello"])
    assert info.value.is_help
    assert "<who>" in info.value.message


def test_help_subcommand_unknown_name():
    with pytest.raises(UsageError) as info:
        say_command().parse(["say", "help", "nothing"])
    assert not info.value.is_help


def test_version_flag():
    cmd = Command("app", version="v0.1.0")
    with pytest.raises(UsageError) as info:
        cmd.parse(["app", "--version"])
    assert info.value.is_help
    assert info.value.message.endswith("v0.1.0")


def test_render_help_contents():
    cmd = say_command()
    cmd.after_help = "See also: nothing"
    text = cmd.render_help()
    assert text.splitlines()[0] == "Greetings!"
    assert cmd.usage() in text
    assert "goodbye" in text
    assert text.endswith("See also: nothing")


def test_find_subcommand():
    cmd = say_command()
    assert cmd.find_subcommand("hello") is cmd.subcommands[0]
    assert cmd.find_subcommand("missing") is None


def test_invalid_command_name():
    with pytest.raises(ValueError):
        Command("two words")


def test_argmatches_contains_and_getitem():
    matches = ArgMatches({"a": "1"}, frozenset({"a", "b"}))
    assert "a" in matches
    assert "b" not in matches
    assert matches["a"] == "1"
    assert matches.get_one("b") is None