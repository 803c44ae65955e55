"""Text normalisation helpers for names"""

import re

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Strip punctuation and collapse whitespace ("Kings' Store,  Ikeja" -> "Kings Store Ikeja")"""
    return _WHITESPACE.sub(" ", _PUNCTUATION.sub("", name)).strip()


def truncate_at_word_boundary(text: str, max_length: int) -> str:
    """
    Shorten text to max_length, keeping whole words.

    Each word is measured with its leading separator, so a first word needs
    max_length - 1 characters or fewer to be kept. Falls back to a hard cut
    with an ellipsis otherwise.
    """
    if len(text) <= max_length:
        return text

    truncated = ""
    for word in text.split(" "):
        if len(f"{truncated} {word}") > max_length:
            break
        truncated = f"{truncated} {word}" if truncated else word

    return truncated or text[: max_length - 3] + "..."
