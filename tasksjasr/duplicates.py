"""Near-duplicate detection for new tasks."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import Task
from .similarity import similarity


TITLE_SIMILARITY_THRESHOLD = 0.8
MIN_SHARED_KEYWORDS = 2
MIN_KEYWORD_LENGTH = 4


def normalize_text(text: str) -> str:
    return (text or "").lower().strip()


def significant_words(title: str) -> List[str]:
    """Words longer than three characters, split on single spaces."""
    return [word for word in title.split(" ") if len(word) >= MIN_KEYWORD_LENGTH]


def shared_keywords(new_title: str, existing_title: str) -> List[str]:
    """Significant words of ``new_title`` that overlap a word of ``existing_title``.

    Two words overlap when either one contains the other.
    """
    existing_words = significant_words(existing_title)
    return [
        word
        for word in significant_words(new_title)
        if any(existing in word or word in existing for existing in existing_words)
    ]


def is_similar_title(new_title: str, existing_title: str) -> bool:
    """Decide whether two already-normalized titles describe the same task."""
    if similarity(new_title, existing_title) > TITLE_SIMILARITY_THRESHOLD:
        return True
    return len(shared_keywords(new_title, existing_title)) >= MIN_SHARED_KEYWORDS


def find_similar_task(title: str, description: str, existing_tasks: Iterable[Task]) -> Optional[Task]:
    """Return the first existing task that the proposed one duplicates, if any.

    Only titles take part in the decision; ``description`` is accepted so the
    call mirrors the task creation request.
    """
    new_title = normalize_text(title)
    for task in existing_tasks:
        if is_similar_title(new_title, normalize_text(task.title)):
            return task
    return None
