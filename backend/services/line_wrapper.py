"""Greedy line wrapping for the card's message block."""
from typing import List


def wrap_lines(text: str, max_chars: int, max_lines: int) -> List[str]:
    """
    Split text into at most max_lines display lines of up to max_chars.

    Explicit newlines always break. Longer segments are wrapped on single
    spaces; a word longer than max_chars gets its own line unsplit. Lines past
    max_lines are dropped.

    Raises:
        ValueError: If max_chars or max_lines is not positive
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")
    if max_lines <= 0:
        raise ValueError(f"max_lines must be positive, got {max_lines}")

    lines: List[str] = []
    for segment in text.split("\n"):
        if len(segment) <= max_chars:
            lines.append(segment)
            continue

        current = ""
        for word in segment.split(" "):
            if current and len(current) + len(word) + 1 > max_chars:
                lines.append(current)
                current = word
            else:
                current = f"{current} {word}" if current else word
        if current:
            lines.append(current)

    return lines[:max_lines]
