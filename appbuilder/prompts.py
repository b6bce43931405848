"""
prompts.py

Responsibility: Ask the operator configuration questions on the terminal.

A command describes its questions as a list of `Question`s. `Prompter.ask`
walks them in order and returns only the answers it collected; callers merge
them into their options bag. A question whose value is already known is
skipped through its `when` predicate.

Questions are shown with questionary; with `use_defaults` nothing is shown and
every question takes its default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Sequence

import questionary

from appbuilder import AppBuilderError

logger = logging.getLogger(__name__)


class PromptError(AppBuilderError):
    pass


@dataclass(frozen=True)
class Question:
    """One configuration question."""

    name: str
    message: str
    kind: str = "input"  # input | confirm | password | choice
    default: Any = None  # a callable receives the answers collected so far
    when: Callable[[dict[str, Any]], bool] | None = None
    filter: Callable[[Any], Any] | None = None
    validate: Callable[[Any], bool | str] | None = None
    choices: tuple[str, ...] = field(default_factory=tuple)


class Prompter:
    def __init__(self, *, use_defaults: bool = False) -> None:
        self.use_defaults = use_defaults

    def ask(self, questions: Sequence[Question]) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for q in questions:
            if q.when is not None and not q.when(answers):
                continue
            if callable(q.default):
                q = replace(q, default=q.default(answers))
            value = self._take_default(q) if self.use_defaults else self._ask_one(q)
            logger.debug("answer %s=%r", q.name, "***" if q.kind == "password" else value)
            answers[q.name] = value
        return answers

    def _take_default(self, q: Question) -> Any:
        value = q.filter(q.default) if q.filter is not None else q.default
        verdict = _verdict(q, value)
        if verdict is not True:
            raise PromptError(f"Default for {q.name} is not valid: {verdict}")
        return value

    def _ask_one(self, q: Question) -> Any:
        raw = self._build(q).ask()
        if raw is None:
            raise PromptError(f"Input aborted while asking for {q.name}")
        if q.kind in ("input", "password"):
            # already checked by questionary's validator
            return self._finish(q, raw)

        value = q.filter(raw) if q.filter is not None else raw
        verdict = _verdict(q, value)
        if verdict is not True:
            raise PromptError(f"Invalid answer for {q.name}: {verdict}")
        return value

    def _build(self, q: Question) -> questionary.Question:
        if q.kind == "confirm":
            return questionary.confirm(q.message, default=bool(q.default))
        if q.kind == "choice":
            default = q.default if q.default in q.choices else None
            return questionary.select(q.message, choices=list(q.choices), default=default)

        def _validate(text: str) -> bool | str:
            return _verdict(q, self._finish(q, text))

        if q.kind == "password":
            return questionary.password(q.message, validate=_validate)
        default = "" if q.default is None else str(q.default)
        return questionary.text(q.message, default=default, validate=_validate)

    def _finish(self, q: Question, text: str) -> Any:
        text = text.strip()
        value = text if text else q.default
        return q.filter(value) if q.filter is not None else value


def _verdict(q: Question, value: Any) -> bool | str:
    verdict = True if q.validate is None else q.validate(value)
    if verdict is True:
        return True
    return verdict if isinstance(verdict, str) else f"Invalid value for {q.name}"


def choice_validator(choices: Sequence[str]) -> Callable[[Any], bool | str]:
    allowed = [c.lower() for c in choices]
    label = " or ".join(f'"{c}"' for c in choices)

    def _validate(value: Any) -> bool | str:
        return True if str(value).lower() in allowed else label

    return _validate


def confirm_validator(value: Any) -> bool | str:
    return True if isinstance(value, bool) else "please answer y or n"


def port_validator(value: Any) -> bool | str:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return "please enter a port number"
    return True if 1 <= port <= 65535 else "please enter a number between 1 and 65535"


def required_validator(value: Any) -> bool | str:
    return True if value not in (None, "") else "a value is required"
