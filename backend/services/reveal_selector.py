"""
Reveal selector.

Picks which characters of a blind message stay readable. The choice is a
seeded hash of the message itself, so the same text always gets the same mask
on the preview image, the share card and the landing page.
"""
from typing import List

from domain.models import RevealSet

MASK_GLYPH = "■"
REVEAL_RATIO = 0.2
MIN_REVEAL = 1
KNUTH_MULTIPLIER = 2654435761
_UINT32 = 2 ** 32

# Never masked: Unicode space separators, tab through carriage return,
# the line and paragraph separators, and the byte order mark.
# Narrower than str.isspace(), which also counts \x1c-\x1f and \x85.
WHITESPACE = frozenset(
    "\t\n\v\f\r \u00a0\u1680\u2028\u2029\u202f\u205f\u3000\ufeff"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
)


def reveal_hash(index: int, seed: int) -> int:
    """Knuth multiplicative hash, wrapped to unsigned 32 bits."""
    return ((index + seed) * KNUTH_MULTIPLIER) % _UINT32


def message_seed(message: str) -> int:
    if not message:
        return 0
    return len(message) * 7 + ord(message[0]) * 13


def _candidate_indices(message: str) -> List[int]:
    return [i for i, ch in enumerate(message) if ch not in WHITESPACE]


def reveal_count_for(candidate_count: int) -> int:
    """20% of the visible characters, at least one, never more than exist."""
    if candidate_count <= 0:
        return 0
    return min(candidate_count, max(MIN_REVEAL, int(candidate_count * REVEAL_RATIO)))


def compute_reveal_set(message: str) -> RevealSet:
    """Indices of non-whitespace characters that stay visible."""
    candidates = _candidate_indices(message)
    if not candidates:
        return frozenset()
    seed = message_seed(message)
    # sorted() is stable, so hash collisions keep original index order
    ordered = sorted(candidates, key=lambda i: reveal_hash(i, seed))
    return frozenset(ordered[:reveal_count_for(len(candidates))])


def blind_message(message: str) -> str:
    """
    Mask a message, leaving whitespace and the reveal set untouched.

    The result has the same length as the input.
    """
    reveal = compute_reveal_set(message)
    return "".join(
        ch if ch in WHITESPACE or i in reveal else MASK_GLYPH
        for i, ch in enumerate(message)
    )
