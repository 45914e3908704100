"""Operator intent classification.

A keyword matcher. Anything smarter (an LLM call) only has to return the
same Intent values.
"""

import re
from enum import Enum


class Intent(str, Enum):
    PROJECT_INIT = "project_init"
    NEW_TASK = "new_task"
    CONTINUE = "continue"
    EXIT = "exit"
    UNKNOWN = "unknown"


# Checked in order; the first match wins
_INTENT_PATTERNS: list[tuple[Intent, re.Pattern[str]]] = [
    (Intent.EXIT, re.compile(r"\b(exit|quit|bye|done|end session)\b")),
    (
        Intent.PROJECT_INIT,
        re.compile(
            r"\b(new project|init|initialise|initialize|scaffold|start fresh|create project)\b"
        ),
    ),
    (
        Intent.CONTINUE,
        re.compile(r"\b(continue|resume|pick up|restore|where (was|were) (i|we))\b"),
    ),
    (
        Intent.NEW_TASK,
        re.compile(r"\b(new (feature|task|plan)|add|implement|build|fix|refactor|update|create)\b"),
    ),
]


def classify_intent(text: str) -> Intent:
    """Map free-form operator input to an Intent."""
    lowered = text.lower()
    for intent, pattern in _INTENT_PATTERNS:
        if pattern.search(lowered):
            return intent
    return Intent.UNKNOWN
