"""Text sanitization for untrusted provider fields."""

import html
import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_TAGS = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize an untrusted text field from a provider payload.

    News descriptions often arrive with HTML fragments and entities, so tags
    are dropped, entities unescaped, control characters removed and runs of
    whitespace collapsed to one space before truncating.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation ("..." is appended)

    Returns:
        Sanitized text, or None if input was None
    """
    if text is None:
        return None

    text = _TAGS.sub(" ", text)
    text = html.unescape(text)
    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
