"""
Keyword classifier for logged messages.

Plain string matching, no model call: the category only scopes later
recall, so it has to be cheap and deterministic.
"""

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    PEOPLE = "people"
    PREFERENCES = "preferences"
    TASKS = "tasks"
    FACTS = "facts"
    OTHER = "other"


@dataclass(frozen=True)
class ClassifierRule:
    """Matches when the text starts with a prefix or contains a phrase."""
    category: Category
    prefixes: tuple[str, ...] = ()
    phrases: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        return text.startswith(self.prefixes) or any(phrase in text for phrase in self.phrases)


# Evaluated top to bottom, first match wins
CLASSIFIER_RULES: tuple[ClassifierRule, ...] = (
    ClassifierRule(
        Category.PEOPLE,
        phrases=(
            "my teacher is", "my teacher's name is",
            "my friend", "my boss is", "my manager is", "my colleague",
            "my wife", "my husband", "my partner is",
            "my mom", "my mother", "my dad", "my father",
            "my brother", "my sister", "my son", "my daughter",
            "my name is",
        ),
    ),
    ClassifierRule(
        Category.PREFERENCES,
        prefixes=("i like", "i love", "i prefer", "i hate", "i enjoy", "i don't like", "i dislike"),
        phrases=("my favorite", "my favourite"),
    ),
    ClassifierRule(
        Category.TASKS,
        prefixes=("remind me", "todo", "to do", "to-do", "task:"),
        phrases=("i need to", "i have to", "don't forget", "remember to"),
    ),
    ClassifierRule(
        Category.FACTS,
        prefixes=("remember that", "fyi", "note that", "note:"),
        phrases=("my birthday", "i live in", "i work at", "i was born"),
    ),
)


def classify(text: str) -> Category:
    """
    Map message text to a category.

    Args:
        text: Raw message text (trimmed and lowercased here)

    Returns:
        Category of the first matching rule, or OTHER
    """
    normalized = (text or "").strip().lower()
    if not normalized:
        return Category.OTHER

    for rule in CLASSIFIER_RULES:
        if rule.matches(normalized):
            return rule.category

    return Category.OTHER
