from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from appbuilder import prompts
from appbuilder.prompts import Prompter

_YES = ("y", "yes")
_NO = ("n", "no")


class Terminal:
    """
    Stands in for questionary: answers each question from a fixed list.

    Like the real prompts, an answer rejected by `validate` (or a key a confirm
    or select prompt ignores) is dropped and the next one is read. Running out
    of answers behaves like Ctrl-C: `ask()` returns None.
    """

    def __init__(self) -> None:
        self.answers: list[str] = []
        self.passwords: list[str] = []
        self.asked: list[tuple[str, str, dict[str, Any]]] = []
        self.rejected: list[tuple[str, str]] = []

    def factory(self, kind: str) -> Callable[..., "_Scripted"]:
        def _make(message: str, **kwargs: Any) -> _Scripted:
            self.asked.append((kind, message, kwargs))
            return _Scripted(self, kind, kwargs)

        return _make


class _Scripted:
    def __init__(self, terminal: Terminal, kind: str, kwargs: dict[str, Any]) -> None:
        self._terminal = terminal
        self._kind = kind
        self._kwargs = kwargs

    def ask(self) -> Any:
        queue = self._terminal.passwords if self._kind == "password" else self._terminal.answers
        while queue:
            raw = queue.pop(0)
            value = self._read(raw)
            if value is None:
                continue
            validate = self._kwargs.get("validate")
            verdict = True if validate is None else validate(value)
            if verdict is not True:
                self._terminal.rejected.append((raw, verdict))
                continue
            return value
        return None

    def _read(self, raw: str) -> Any:
        default = self._kwargs.get("default")
        if self._kind == "confirm":
            lowered = raw.strip().lower()
            if not lowered:
                return bool(default)
            if lowered in _YES:
                return True
            if lowered in _NO:
                return False
            return None
        if self._kind == "select":
            choices = self._kwargs.get("choices", [])
            if not raw:
                return default if default is not None else choices[0]
            return raw if raw in choices else None
        if self._kind == "text" and not raw:
            # the prefilled default is accepted as typed
            return default or ""
        return raw


@pytest.fixture
def terminal(monkeypatch) -> Terminal:
    term = Terminal()
    for kind in ("text", "password", "confirm", "select"):
        monkeypatch.setattr(prompts.questionary, kind, term.factory(kind))
    return term


@pytest.fixture
def scripted(terminal: Terminal) -> Callable[..., Prompter]:
    def _make(*answers: str, passwords: tuple[str, ...] = ()) -> Prompter:
        terminal.answers = list(answers)
        terminal.passwords = list(passwords)
        return Prompter()

    return _make


@pytest.fixture
def defaults_prompter(terminal: Terminal) -> Prompter:
    return Prompter(use_defaults=True)


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    root = tmp_path / "install"
    root.mkdir()
    return root
