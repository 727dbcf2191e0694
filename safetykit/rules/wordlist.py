"""Compile comma-separated word lists into a single alternation regex."""

from __future__ import annotations

import re

from safetykit.errors import CompileError

PLACEHOLDER = "%s"

# Standalone words: "abc" must not match inside "abchello".
WORD_TEMPLATE = r"(?mi)\b(%s)\b"

# Domains and usernames are matched anywhere inside a larger string.
SUBSTRING_TEMPLATE = r"(?mi)(%s)"


def split_word_list(word_list: str) -> list[str]:
    """Split on commas, trim each token and drop empty ones."""
    return [token.strip() for token in word_list.split(",") if token.strip()]


def build_pattern(word_list: str, template: str = WORD_TEMPLATE) -> str:
    """Return the regex source for *word_list* substituted into *template*.

    Longer tokens come first so that a phrase like "abc def" is tried
    before its prefix "abc". The sort is stable for equal lengths.
    """
    if template.count(PLACEHOLDER) != 1:
        raise CompileError(
            f"regex template must contain exactly one {PLACEHOLDER!r} placeholder: {template!r}"
        )
    tokens = sorted(split_word_list(word_list), key=len, reverse=True)
    return template.replace(PLACEHOLDER, "|".join(tokens))


def compile_word_list(word_list: str, template: str = WORD_TEMPLATE) -> re.Pattern[str] | None:
    """Compile *word_list* into a case-insensitive matcher.

    Returns ``None`` when the list holds no tokens: an empty list means
    "no restriction", never "match everything".

    Raises:
        CompileError: the tokens and template do not form a valid pattern.
    """
    if not split_word_list(word_list):
        return None
    source = build_pattern(word_list, template)
    try:
        return re.compile(source)
    except re.error as e:
        raise CompileError(f"unable to compile regex from word list {word_list!r}: {e}") from e
