from replforge.prompt import DEFAULT_PROMPT_INDICATOR, ReplPrompt


def test_default_prefix_is_repl():
    assert ReplPrompt().render() == "repl"


def test_render_returns_prefix():
    assert ReplPrompt("MyApp> ").render() == "MyApp> "


def test_prefix_can_be_updated():
    prompt = ReplPrompt("a")
    prompt.prefix = "MyList [1]"
    assert prompt.render() == "MyList [1]"


def test_full_prompt_is_prefix_then_indicator():
    prompt = ReplPrompt("MyApp> ")
    assert str(prompt) == "MyApp> " + prompt.indicator()
    assert prompt.indicator() == DEFAULT_PROMPT_INDICATOR


def test_indicator_independent_of_prefix():
    assert ReplPrompt("x").indicator() == ReplPrompt("y").indicator()