# src/getodone/core/prompt.py

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from .models import Task, Tone

SYSTEM_PROMPT_SOFT: Final[str] = (
    "You're a kind and supportive motivator. Help the user overcome their resistance with empathy."
)

SYSTEM_PROMPT_HARD: Final[str] = (
    "You're a strict AI coach. Remind the user of discipline and consequences for not acting."
)

SYSTEM_PROMPT_NEUTRAL: Final[str] = (
    "You're a rational and helpful AI buddy. Offer motivating logic to help the user get things done."
)

SYSTEM_PROMPT_FALLBACK: Final[str] = "You're a helpful AI assistant."

_SYSTEM_PROMPTS: Final[dict[str, str]] = {
    Tone.SOFT.value: SYSTEM_PROMPT_SOFT,
    Tone.HARD.value: SYSTEM_PROMPT_HARD,
    Tone.NEUTRAL.value: SYSTEM_PROMPT_NEUTRAL,
}


def get_system_prompt(tone: Tone | str) -> str:
    """Return the system instruction for a tone (generic fallback for unknown values)."""
    return _SYSTEM_PROMPTS.get(str(tone), SYSTEM_PROMPT_FALLBACK)


def pending_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_completed]


def compose_prompt(tasks: Iterable[Task], tone: Tone | str) -> str:
    """
    Build the single user message sent to the text-generation backend.

    Only incomplete tasks are listed. An empty list still yields a prompt with an
    empty task section; whether to send it is the caller's decision.
    """
    system_prompt = get_system_prompt(tone)
    bullets = "\n".join(f"- {t.title}" for t in pending_tasks(tasks))

    user_prompt = (
        f"User has the following pending tasks:\n{bullets}\n\n"
        f"Generate a motivational message in {tone} tone that nudges them to take action."
    )
    return f"{system_prompt}\n\n{user_prompt}"
