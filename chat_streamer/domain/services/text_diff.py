"""Suffix diff used by thread-mode delivery."""


def diff_append(prev: str, next_text: str) -> str:
    """
    Return the part of next_text not yet seen in prev.

    Thread text is expected to only grow. Any change that does not extend
    prev is treated as a reset and the whole next_text is returned.
    """
    if next_text == prev:
        return ""
    if next_text.startswith(prev):
        return next_text[len(prev):]
    return next_text
