"""
Shared text measurement for both card renderers.

Glyph positions are computed here once, from Pillow font metrics, and both the
SVG preview and the Pillow canvas draw from them. Letter spacing therefore
looks the same in either output.
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from domain.errors import ConfigurationError
from domain.models import FontRole, FontWeight, TextAlign, TextRun
from settings import settings

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@lru_cache(maxsize=64)
def load_font(path: Optional[str], size: int) -> Font:
    """Load a TrueType font, falling back to Pillow's built-in face."""
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("Font '%s' not found. Using default.", path)
    else:
        logger.warning("No card font configured. Using default, which has no Hangul or mask glyphs.")
    return ImageFont.load_default(size=size)


# Characters every card font must draw: Hangul copy and the mask glyph
COVERAGE_SAMPLE = "가■"

# Noncharacter no font maps; renders as the font's .notdef glyph
_UNMAPPED = "\uffff"


def _glyph_bitmap(font: Font, ch: str) -> bytes:
    side = int(getattr(font, "size", 16)) * 2 + 8
    canvas = Image.new("L", (side, side), 0)
    ImageDraw.Draw(canvas).text((4, 4), ch, font=font, fill=255)
    return canvas.tobytes()


def missing_glyphs(font: Font, text: str) -> str:
    """Characters of text the font draws as its .notdef box, in order."""
    notdef = _glyph_bitmap(font, _UNMAPPED)
    return "".join(ch for ch in text if not ch.isspace() and _glyph_bitmap(font, ch) == notdef)


@dataclass(frozen=True)
class ResolvedFont:
    font: Font
    # No bold face configured: renderers thicken the regular face instead
    synthetic_bold: bool = False


@dataclass(frozen=True)
class FontSet:
    """Font files for each text role. None means Pillow's default face."""
    sans_path: Optional[str] = None
    sans_bold_path: Optional[str] = None
    mono_path: Optional[str] = None
    brand_path: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "FontSet":
        return cls(
            sans_path=settings.CARD_FONT_PATH,
            sans_bold_path=settings.CARD_FONT_BOLD_PATH,
            mono_path=settings.CARD_MONO_FONT_PATH,
            brand_path=settings.CARD_BRAND_FONT_PATH,
        )

    def _path_for(self, role: FontRole) -> Optional[str]:
        if role == FontRole.MONO:
            return self.mono_path or self.sans_path
        if role == FontRole.BRAND:
            return self.brand_path or self.sans_path
        return self.sans_path

    def resolve(self, run: TextRun, scale: float = 1.0) -> ResolvedFont:
        size = max(1, int(round(run.font_size * scale)))
        bold = run.weight == FontWeight.BOLD
        if bold and run.font_role == FontRole.SANS and self.sans_bold_path:
            return ResolvedFont(load_font(self.sans_bold_path, size))
        return ResolvedFont(load_font(self._path_for(run.font_role), size), synthetic_bold=bold)

    def check_coverage(self, sample: str = COVERAGE_SAMPLE) -> None:
        """
        Fail fast on configured fonts that cannot load or cannot draw sample.

        The brand face only has to load; it renders Latin branding.

        Raises:
            ConfigurationError: On an unreadable font or missing glyphs
        """
        configured = (
            ("CARD_FONT_PATH", self.sans_path, True),
            ("CARD_FONT_BOLD_PATH", self.sans_bold_path, True),
            ("CARD_MONO_FONT_PATH", self.mono_path, True),
            ("CARD_BRAND_FONT_PATH", self.brand_path, False),
        )
        for name, path, needs_sample in configured:
            if not path:
                continue
            try:
                font = ImageFont.truetype(path, 32)
            except OSError as exc:
                raise ConfigurationError(f"{name}: cannot load font {path!r}") from exc
            missing = missing_glyphs(font, sample) if needs_sample else ""
            if missing:
                raise ConfigurationError(f"{name}: font {path!r} has no glyph for {missing!r}")
        if not self.sans_path:
            logger.warning("CARD_FONT_PATH is not set; cards will draw Hangul and %s as empty boxes", sample)

    def family_name(self, role: FontRole) -> Optional[str]:
        """Family name of the configured font file, if any, for vector output."""
        path = self._path_for(role)
        if not path:
            return None
        font = load_font(path, 16)
        if isinstance(font, ImageFont.FreeTypeFont):
            return font.getname()[0]
        return None


def measure_run(text: str, font: Font, letter_spacing: float) -> float:
    """Advance width of a run with tracking; no spacing after the last glyph."""
    if not text:
        return 0.0
    total = sum(font.getlength(ch) for ch in text)
    return total + letter_spacing * (len(text) - 1)


def place_glyphs(run: TextRun, font: Font) -> List[Tuple[str, float]]:
    """
    Left x of each glyph after alignment and letter spacing.

    Glyphs are placed one by one, so kerning between pairs is not applied.
    """
    width = measure_run(run.text, font, run.letter_spacing)
    if run.align == TextAlign.CENTER:
        x = run.x - width / 2
    elif run.align == TextAlign.RIGHT:
        x = run.x - width
    else:
        x = run.x

    placed: List[Tuple[str, float]] = []
    for ch in run.text:
        placed.append((ch, x))
        x += font.getlength(ch) + run.letter_spacing
    return placed


_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGBA_RE = re.compile(r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$")


def parse_color(value: str) -> Tuple[int, int, int, int]:
    """
    Parse '#rgb', '#rrggbb', '#rrggbbaa' or 'rgb(a)(...)' into an RGBA tuple.

    Raises:
        ValueError: On any other format
    """
    value = value.strip()
    m = _HEX_RE.match(value)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) == 6:
            digits += "ff"
        return tuple(int(digits[i:i + 2], 16) for i in range(0, 8, 2))  # type: ignore[return-value]
    m = _RGBA_RE.match(value)
    if m:
        r, g, b = (max(0, min(255, int(float(c)))) for c in m.group(1, 2, 3))
        alpha = m.group(4)
        a = 255 if alpha is None else max(0, min(255, int(round(float(alpha) * 255))))
        return (r, g, b, a)
    raise ValueError(f"Unsupported color: {value!r}")
