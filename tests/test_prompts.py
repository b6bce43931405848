from __future__ import annotations

import pytest

from appbuilder.prompts import (
    PromptError,
    Question,
    choice_validator,
    confirm_validator,
    port_validator,
)


def test_empty_input_takes_default(scripted) -> None:
    prompter = scripted("")
    assert prompter.ask([Question(name="stack", message="Stack:", default="ab")]) == {"stack": "ab"}


def test_text_question_is_prefilled_with_default(scripted, terminal) -> None:
    scripted("").ask([Question(name="port", message="Port:", default=80)])
    kind, message, kwargs = terminal.asked[0]
    assert (kind, message, kwargs["default"]) == ("text", "Port:", "80")


def test_when_skips_question(scripted) -> None:
    prompter = scripted("8080")
    questions = [
        Question(name="stack", message="Stack:", default="ab", when=lambda a: False),
        Question(name="port", message="Port:", default=80),
    ]
    assert prompter.ask(questions) == {"port": "8080"}


def test_invalid_answer_is_asked_again(scripted, terminal) -> None:
    prompter = scripted("staging", "develop")
    q = Question(name="tag", message="Tag:", default="master", validate=choice_validator(["master", "develop"]))
    assert prompter.ask([q]) == {"tag": "develop"}
    assert terminal.rejected == [("staging", '"master" or "develop"')]


def test_filter_runs_before_validate(scripted) -> None:
    prompter = scripted("  Develop ")
    q = Question(
        name="tag",
        message="Tag:",
        default="master",
        filter=str.lower,
        validate=choice_validator(["master", "develop"]),
    )
    assert prompter.ask([q]) == {"tag": "develop"}


def test_confirm_questions(scripted, terminal) -> None:
    prompter = scripted("y", "", "maybe", "no")
    questions = [
        Question(name="a", message="A?", kind="confirm", default=False, validate=confirm_validator),
        Question(name="b", message="B?", kind="confirm", default=True, validate=confirm_validator),
        Question(name="c", message="C?", kind="confirm", default=True, validate=confirm_validator),
    ]
    assert prompter.ask(questions) == {"a": True, "b": True, "c": False}
    assert [kwargs["default"] for _kind, _msg, kwargs in terminal.asked] == [False, True, True]


def test_when_sees_earlier_answers(scripted) -> None:
    prompter = scripted("y", "3307")
    questions = [
        Question(name="exposeDB", message="Expose?", kind="confirm", default=False),
        Question(name="portDB", message="Port:", default=3306, when=lambda a: a["exposeDB"]),
    ]
    assert prompter.ask(questions) == {"exposeDB": True, "portDB": "3307"}


def test_callable_default_receives_answers(defaults_prompter) -> None:
    questions = [
        Question(name="tls", message="TLS?", kind="confirm", default=True),
        Question(name="port", message="Port:", default=lambda a: 465 if a["tls"] else 25),
    ]
    assert defaults_prompter.ask(questions) == {"tls": True, "port": 465}


def test_defaults_mode_shows_nothing(defaults_prompter, terminal) -> None:
    defaults_prompter.ask([Question(name="stack", message="Stack:", default="ab")])
    assert terminal.asked == []


def test_password_question(scripted, terminal) -> None:
    prompter = scripted(passwords=("s3cret",))
    assert prompter.ask([Question(name="pw", message="Password:", kind="password")]) == {"pw": "s3cret"}
    assert terminal.asked[0][0] == "password"


def test_choice_is_a_select(scripted, terminal) -> None:
    prompter = scripted("self")
    q = Question(name="mode", message="Mode:", kind="choice", choices=("none", "self"), default="none")
    assert prompter.ask([q]) == {"mode": "self"}
    kind, _message, kwargs = terminal.asked[0]
    assert kind == "select"
    assert kwargs["choices"] == ["none", "self"]
    assert kwargs["default"] == "none"


def test_abort_raises_prompt_error(scripted) -> None:
    prompter = scripted()
    with pytest.raises(PromptError, match="port"):
        prompter.ask([Question(name="port", message="Port:", default=80)])


def test_invalid_default_raises_in_defaults_mode(defaults_prompter) -> None:
    q = Question(name="token", message="Token:", validate=lambda v: True if v else "a value is required")
    with pytest.raises(PromptError):
        defaults_prompter.ask([q])


def test_port_validator() -> None:
    assert port_validator("8080") is True
    assert port_validator(0) is not True
    assert port_validator("http") is not True
