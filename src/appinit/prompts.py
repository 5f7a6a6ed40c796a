"""Module: appinit.prompts

Purpose: Interactive prompt surface used by every stage.

Key Components:
- Prompter: ask (free text with default), choice (single choice with default index),
  secret (masked input)
"""

from __future__ import annotations

from typing import Sequence

import questionary
from questionary import Style

from appinit.errors import PromptAborted

custom_style = Style(
    [
        ('qmark', 'fg:#00ff00 bold'),
        ('question', 'bold'),
        ('answer', 'fg:#00ff00 bold'),
        ('pointer', 'fg:#00ff00 bold'),
        ('highlighted', 'fg:#00ff00 bold'),
        ('selected', 'fg:#00ff00'),
    ]
)


class Prompter:
    """Questionary-backed operator prompts.

    Key Behaviors:
    - All answers are returned as strings
    - Cancelling a prompt (Ctrl-C) raises PromptAborted
    """

    def ask(self, question: str, default: str = '') -> str:
        answer = questionary.text(question, default=str(default), style=custom_style).ask()
        return self._unwrap(question, answer)

    def choice(self, question: str, choices: Sequence[object], default: int = 0) -> str:
        options = [str(choice) for choice in choices]
        answer = questionary.select(
            question,
            choices=options,
            default=options[default],
            style=custom_style,
        ).ask()
        return self._unwrap(question, answer)

    def secret(self, question: str) -> str:
        answer = questionary.password(question, style=custom_style).ask()
        return self._unwrap(question, answer)

    @staticmethod
    def _unwrap(question: str, answer: str | None) -> str:
        if answer is None:
            raise PromptAborted(f'Prompt cancelled: {question}')
        return answer
