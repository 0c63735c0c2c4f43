import pytest

from replforge.demo import (
    CustomError,
    ListContext,
    build_async_repl,
    build_calculator_repl,
    build_failing_repl,
    build_hello_repl,
    build_keybinding_repl,
    build_list_repl,
    build_subcommands_repl,
    main,
)
from replforge.errors import ParseIntError, UnknownCommand
from replforge.keybindings import Edit, EditCommand, ExecuteHostCommand, KeyCode, KeyModifiers


def test_hello_greets(capsys):
    repl = build_hello_repl()
    repl.process_line("hello World")
    assert capsys.readouterr().out == "Hello, World\n"


def test_hello_quoted_name(capsys):
    build_hello_repl().process_line('hello "Big World"')
    assert capsys.readouterr().out == "Hello, Big World\n"


def test_hello_metadata():
    repl = build_hello_repl()
    assert repl.name == "MyApp"
    assert repl.version == "v0.1.0"
    assert repl.banner == "Welcome to MyApp"
    text = repl.help_text()
    assert "Greetings!" in text
    assert "My very cool app" in text


def test_hello_missing_argument_is_reported(capsys):
    build_hello_repl().process_line("hello")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "who" in captured.err


def test_unknown_command_raises():
    with pytest.raises(UnknownCommand):
        build_hello_repl().process_line("nothing")


def test_list_append_and_prepend(capsys):
    repl = build_list_repl()
    repl.process_line("append a")
    repl.process_line("append b")
    repl.process_line("prepend c")
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["a", "a, b", "c, a, b"]
    assert list(repl.context.items) == ["c", "a", "b"]
    assert repl.prompt.prefix == "MyList [3]"


def test_list_context_starts_empty():
    context = ListContext()
    assert context.joined() == ""
    assert len(context.items) == 0


def test_calculator_adds(capsys):
    build_calculator_repl().process_line("add 2 3")
    assert capsys.readouterr().out == "5\n"


def test_calculator_negative(capsys):
    build_calculator_repl().process_line("add -- -4 1")
    assert capsys.readouterr().out == "-3\n"


@pytest.mark.parametrize("line", ["add x 3", "add 1 2.5", "add 99999999999 1"])
def test_calculator_rejects_bad_numbers(line):
    with pytest.raises(ParseIntError):
        build_calculator_repl().process_line(line)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("say hello Bob", "Hello, Bob\n"),
        ("say goodbye", "Goodbye!\n"),
        ("say goodbye --spanish", "Adiós!\n"),
    ],
)
def test_subcommands(capsys, line, expected):
    build_subcommands_repl().process_line(line)
    assert capsys.readouterr().out == expected


def test_subcommand_missing_raises():
    with pytest.raises(RuntimeError):
        build_subcommands_repl().process_line("say")


def test_failing_command_raises_custom_error():
    with pytest.raises(CustomError) as info:
        build_failing_repl().process_line("hello")
    assert str(info.value) == "String Error: Returning an error"


def test_failing_repl_reports_through_handler(capsys):
    build_failing_repl().run_with_reader(["hello\n", "nope\n"])
    err = capsys.readouterr().err.splitlines()
    assert err[0] == "String Error: Returning an error"
    assert err[1] == "REPL Error: Error: Unknown command 'nope'"


def test_custom_error_wraps_repl_error():
    wrapped = CustomError.from_repl_error(UnknownCommand("x"))
    assert wrapped.repl_error == UnknownCommand("x")
    assert str(wrapped) == f"REPL Error: {UnknownCommand('x')}"


def test_keybindings_added():
    repl = build_keybinding_repl()
    g = KeyCode.char("g")
    assert repl.find_keybinding(KeyModifiers.CONTROL, g) == ExecuteHostCommand("hello Friend")
    assert repl.find_keybinding(KeyModifiers.CONTROL, KeyCode.char("h")) == ExecuteHostCommand(
        "help"
    )
    assert repl.find_keybinding(KeyModifiers.CONTROL, KeyCode.char("u")) == Edit(
        (EditCommand.UPPERCASE_WORD,)
    )
    assert repl.find_keybinding(KeyModifiers.CONTROL, KeyCode.char("l")) == Edit(
        (EditCommand.LOWERCASE_WORD,)
    )
    bindings = repl.get_keybindings()
    assert bindings[(KeyModifiers.CONTROL, g)] == ExecuteHostCommand("hello Friend")


@pytest.mark.asyncio
async def test_async_hello_updates_prompt(capsys):
    repl = build_async_repl()
    await repl.process_line_async("hello Ann")
    assert capsys.readouterr().out == "Hello, Ann\n"
    assert repl.prompt.prefix == "updated"


def test_main_runs_single_command(capsys):
    assert main(["hello", "hello", "Zed"]) == 0
    assert capsys.readouterr().out == "Hello, Zed\n"


def test_main_async_single_command(capsys):
    assert main(["async", "hello", "Q"]) == 0
    assert capsys.readouterr().out == "Hello, Q\n"


def test_main_derived_list(capsys):
    assert main(["derive-list", "append", "x"]) == 0
    assert capsys.readouterr().out == "x\n"


def test_main_derived_hello(capsys):
    assert main(["derive-hello", "hello", "Ada"]) == 0
    assert capsys.readouterr().out == "Hello, Ada\n"


def test_main_reports_error(capsys):
    assert main(["failing", "hello"]) == 1
    assert "String Error: Returning an error" in capsys.readouterr().err


def test_main_usage_errors(capsys):
    assert main([]) == 2
    assert main(["unknown-demo"]) == 2
    assert "hello" in capsys.readouterr().err