from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from ensemble.catalog import CEILING_CAN, PENDANT

IntentKind = Literal["add", "remove", "explain", "cost", "energy", "unknown"]

MUTATING_INTENTS = frozenset({"add", "remove"})


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    fixture_kind: Optional[str] = None

    @property
    def mutates(self) -> bool:
        return self.kind in MUTATING_INTENTS

    def __str__(self) -> str:
        if self.fixture_kind:
            return f"{self.kind}:{self.fixture_kind}"
        return self.kind


def _mentions(text: str, *words: str) -> bool:
    return any(w in text for w in words)


def classify_intent(message: str) -> Intent:
    """
    Keyword classification of a chat message. Matching is case-insensitive substring
    search and the first rule that matches wins.
    """
    text = str(message or "").strip().lower()

    if _mentions(text, "add", "more"):
        if "pendant" in text:
            return Intent("add", PENDANT)
        if _mentions(text, "can", "recessed"):
            return Intent("add", CEILING_CAN)

    if _mentions(text, "remove", "less"):
        return Intent("remove")
    if "why" in text:
        return Intent("explain")
    if _mentions(text, "cost", "price"):
        return Intent("cost")
    if _mentions(text, "energy", "efficiency"):
        return Intent("energy")
    return Intent("unknown")
