"""Operator prompts.

Every interactive decision is a Question: the text shown, a validator that
turns the raw answer into a value (or raises ValueError), and whether an
invalid answer is asked again or aborts. Stages handle the validated value.
The Prompter takes its input and output callables as arguments so tests can
drive a whole run from a list of answers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

YES = {"y", "yes"}


def parse_yes_no(answer: str) -> bool:
    # Anything but an explicit yes counts as no.
    return answer.strip().lower() in YES


def non_empty(answer: str) -> str:
    value = answer.strip()
    if not value:
        raise ValueError("a value is required")
    return value


@dataclass(frozen=True)
class Question:
    text: str
    validate: Callable[[str], Any]
    retry: bool = True


class Prompter:
    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self._read = read
        self._write = write

    @classmethod
    def scripted(cls, answers: Iterable[str], write: Optional[Callable[[str], None]] = None) -> "Prompter":
        """A prompter that replays answers in order; EOFError once they run out."""
        it = iter(answers)

        def read(_prompt: str) -> str:
            try:
                return next(it)
            except StopIteration:
                raise EOFError("no scripted answer left") from None

        return cls(read=read, write=write or (lambda _line: None))

    def say(self, line: str = "") -> None:
        self._write(line)

    def ask(self, question: Question) -> Any:
        while True:
            raw = self._read(question.text)
            try:
                value = question.validate(raw)
            except ValueError as e:
                if not question.retry:
                    raise
                self.say(f"Invalid input: {e}")
                continue
            logger.debug("Prompt %r answered", question.text)
            return value

    def confirm(self, text: str) -> bool:
        return bool(self.ask(Question(f"{text} (y/N): ", parse_yes_no)))

    def text(self, text: str) -> str:
        return str(self.ask(Question(f"{text}: ", non_empty)))
