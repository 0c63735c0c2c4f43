# replforge

replforge builds interactive command shells for your application. You declare
commands with their arguments, options and subcommands, and replforge provides:

- a prompt with line editing, history suggestions and tab completion of
  command names, subcommands, options and allowed values
  (built on prompt-toolkit);
- a `help` command that is generated from your command definitions;
- argument parsing that reports usage errors and `--help` text without
  leaving the shell;
- state kept between commands in a context object of your choice;
- Emacs-style keybindings that you can change;
- synchronous and asynchronous command callbacks.

## Installation

```
pip install replforge
```

## A first shell

```python
from replforge.cli import Arg, Command
from replforge.repl import Repl


def hello(args, context):
    return f"Hello, {args.get_one('who')}"


repl = (
    Repl(None)
    .with_name("MyApp")
    .with_version("v0.1.0")
    .with_description("My very cool app")
    .with_banner("Welcome to MyApp")
    .with_command(
        Command("hello", about="Greetings!").arg(Arg("who", required=True)),
        hello,
    )
)
repl.run()
```

A callback receives the parsed arguments (`replforge.cli.ArgMatches`) and the
context. If it returns a string, the string is printed. If it returns `None`,
nothing is printed. In `run()` and `run_with_reader()`, an exception raised by a
command goes to the error handler. The default handler prints the exception to
stderr and the shell keeps running. You can install another handler with
`with_error_handler(handler)`, where `handler(error, repl)`. An unknown command
name raises `replforge.errors.UnknownCommand`.

When the input does not fit a command, the usage error is printed to stderr.
When the input asks for `--help`, `-h` or `--version`, that text is printed to
stdout. In both cases the callback is not called.

## Declaring commands

`replforge.cli` has `Command`, `Arg`, `ArgAction` and `PossibleValue`:

```python
from replforge.cli import Arg, ArgAction, Command

say = (
    Command("say", about="Greetings!")
    .subcommand(Command("hello").arg(Arg("who", required=True)))
    .subcommand(
        Command("goodbye").arg(Arg("spanish", long="spanish", action=ArgAction.SET_TRUE))
    )
)
```

An `Arg` with neither `long` nor `short` is positional. `choices` limits the
allowed values, and those values are also offered by tab completion. `default`
supplies a value when the argument is missing. An argument cannot be both
required and defaulted, and a required argument must take a value. Breaking
either rule raises `IllegalDefaultError` or `IllegalRequiredError`.

In a callback, read values with `args.get_one(name)` and flags with
`args.get_flag(name)`. `args.subcommand()` returns the chosen subcommand as a
`(name, matches)` pair.

## Keeping state

The object you pass to `Repl(...)` is handed to every callback. A callback
registered with `with_on_after_command` runs after each command. If it returns a
string, that string becomes the new prompt.

```python
from dataclasses import dataclass, field


@dataclass
class Names:
    items: list = field(default_factory=list)


def append(args, context):
    context.items.append(args.get_one("name"))
    return ", ".join(context.items)


repl = (
    Repl(Names())
    .with_name("MyList")
    .with_command(Command("append").arg(Arg("name", required=True)), append)
    .with_on_after_command(lambda ctx: f"MyList [{len(ctx.items)}]")
)
```

## Commands from one application definition

`with_derived(app, callbacks)` reads the name, version and description from a
`Command`. It then registers each subcommand of that `Command` that has an
entry in the `callbacks` mapping. `with_async_derived` does the same with
coroutine functions.

## Async commands

Register coroutine functions with `with_command_async` and
`with_on_after_command_async`, then start the shell with
`await repl.run_async()`. The async entry points (`run_async`,
`process_argv_async`, `process_line_async`) run both kinds of command. The
synchronous `process_argv` raises `TypeError` for an asynchronous command.

## Running commands without a prompt

- `process_argv(words)` runs one command from a list of words, for example
  `sys.argv[1:]`.
- `process_line(line)` does the same for a line of text. Double quotes group
  words and are removed; the splitting is done by `replforge.repl.parse_line`.
- `run_with_reader(stream)` runs every line of a file-like object as a script.
- `help_text(args)` returns the help as a string.

## Other settings

- `with_history(path, capacity)` keeps the input history in a file and loads
  at most `capacity` entries from it.
- `with_prompt(text)` sets the prompt text.
- `with_stop_on_ctrl_c(flag)` and `with_stop_on_ctrl_d(flag)` choose whether
  Ctrl+C and Ctrl+D end the loop. By default Ctrl+C does not and Ctrl+D does.
- `with_quick_completions(flag)` and `with_partial_completions(flag)` control
  tab completion.
- `with_hinter_style(style)` sets the style of history suggestions, as a
  prompt-toolkit style string. `with_hinter_disabled()` turns the suggestions
  off.
- `external_printer()` returns an object whose `print(message)` method other
  threads can call to print above the prompt while the shell runs.

## Keybindings

Emacs-style keybindings are the default, and Tab opens the completion menu.
The bindings are in `replforge.keybindings`:

```python
from replforge.keybindings import Edit, EditCommand, ExecuteHostCommand, KeyCode, KeyModifiers

repl = (
    repl.with_keybinding(
        KeyModifiers.CONTROL, KeyCode.char("g"), ExecuteHostCommand("hello Friend")
    )
    .with_keybinding(
        KeyModifiers.CONTROL, KeyCode.char("u"), Edit((EditCommand.UPPERCASE_WORD,))
    )
    .without_keybinding(KeyModifiers.CONTROL, KeyCode.char("t"))
)
```

`find_keybinding` returns the event bound to a key combination.
`get_keybindings` returns all bindings as a dictionary.

## Demo

The package includes example shells:

```
replforge-demo <demo> [command ...]
```

The demos are `hello`, `list`, `calculator`, `subcommands`, `failing`,
`keybindings`, `async`, `derive-hello` and `derive-list`. With no other words
the chosen shell starts interactively. With more words, those words are run as
a single command and the program exits. For example:

```
replforge-demo hello hello World
```

Running `replforge-demo` without a demo name prints the list of demos.