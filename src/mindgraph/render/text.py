"""Text helpers for node cards."""

import re

from mindgraph.models.node import parse_datetime

_WHITESPACE = re.compile(r"\s+")


def truncate_words(text: str | None, max_words: int = 20) -> str:
    """First ``max_words`` words of ``text`` followed by "...", or the text unchanged."""
    if not text or not isinstance(text, str):
        return ""

    words = _WHITESPACE.split(text.strip())
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + "..."


def format_time_label(created_at: str | None) -> str:
    """Short clock label such as "02:34 PM"; empty if the timestamp is unreadable."""
    try:
        moment = parse_datetime(created_at)
    except ValueError:
        return ""
    if moment is None:
        return ""
    return moment.strftime("%I:%M %p")
