"""
Letter themes.

The theme id rides along in the token and is only consumed by the front end
and the landing page; the card layout never reads it.
"""
from typing import Dict, List

from domain.models import LetterTheme


LETTER_THEMES: List[LetterTheme] = [
    LetterTheme(id="love", name="사랑", emoji="💌", accent_color="#ec4899"),
    LetterTheme(id="birthday", name="생일", emoji="🎂", accent_color="#f59e0b"),
    LetterTheme(id="thanks", name="감사", emoji="🙏", accent_color="#10b981"),
    LetterTheme(id="cheer", name="응원", emoji="💪", accent_color="#3b82f6"),
    LetterTheme(id="graduation", name="졸업", emoji="🎓", accent_color="#8b5cf6"),
    LetterTheme(id="simple", name="심플", emoji="✉️", accent_color="#71717a"),
]

_themes_by_id: Dict[str, LetterTheme] = {t.id: t for t in LETTER_THEMES}

DEFAULT_THEME = LETTER_THEMES[0]


def get_theme_by_id(theme_id: str) -> LetterTheme:
    """Look up a theme, falling back to the first one for unknown ids."""
    return _themes_by_id.get(theme_id, DEFAULT_THEME)


def is_known_theme(theme_id: str) -> bool:
    return theme_id in _themes_by_id
