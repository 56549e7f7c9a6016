"""Text sanitization for third-party news content."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE_RUN = re.compile(r"\s{2,}")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize an untrusted headline or summary.

    Newlines and tabs become spaces, other control characters are dropped,
    whitespace runs collapse, and the result is truncated to max_length.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    text = text.replace("\n", " ").replace("\t", " ")
    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE_RUN.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
