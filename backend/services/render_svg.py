"""
Preview image renderer.

Serializes a CardLayout to SVG and rasterizes it to PNG with Wand
(ImageMagick) for link-preview crawlers.
"""
import html
import logging
from typing import List, Optional

from domain.errors import RenderFailure
from domain.models import (
    CardLayout, CardStyle, Circle, DrawInstruction, FilledRect, FontRole, FontWeight,
    Line, PathStroke, QrMatrix, RoundedRect, TextRun,
)
from services.layout_engine import get_variant, list_variants
from services.text_layout import FontSet, place_glyphs

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def _esc(text: str) -> str:
    return html.escape(text, quote=True)


def build_card_svg(layout: CardLayout, fonts: Optional[FontSet] = None, style: Optional[CardStyle] = None) -> str:
    """
    SVG document for a layout.

    Text runs carry explicit per-glyph x positions so letter spacing and
    alignment follow the shared text layout instead of the rasterizer's.
    """
    fonts = fonts or FontSet.from_settings()
    style = style or _style_for(layout)
    body: List[str] = [_svg_element(i, fonts, style) for i in layout.instructions]
    return (
        f'<svg width="{layout.width}" height="{layout.height}" '
        f'viewBox="0 0 {layout.width} {layout.height}" xmlns="{SVG_NS}">\n  '
        + "\n  ".join(body)
        + "\n</svg>"
    )


def _style_for(layout: CardLayout) -> CardStyle:
    if layout.variant in list_variants():
        return get_variant(layout.variant).style
    return CardStyle()


def _svg_element(instruction: DrawInstruction, fonts: FontSet, style: CardStyle) -> str:
    if isinstance(instruction, FilledRect):
        return (
            f'<rect x="{_fmt(instruction.x)}" y="{_fmt(instruction.y)}" '
            f'width="{_fmt(instruction.width)}" height="{_fmt(instruction.height)}" '
            f'fill="{instruction.fill}"/>'
        )
    if isinstance(instruction, RoundedRect):
        return (
            f'<rect x="{_fmt(instruction.x)}" y="{_fmt(instruction.y)}" '
            f'width="{_fmt(instruction.width)}" height="{_fmt(instruction.height)}" '
            f'rx="{_fmt(instruction.radius)}" fill="{instruction.fill}"{_stroke_attrs(instruction)}/>'
        )
    if isinstance(instruction, Circle):
        return (
            f'<circle cx="{_fmt(instruction.cx)}" cy="{_fmt(instruction.cy)}" '
            f'r="{_fmt(instruction.radius)}" fill="{instruction.fill}"/>'
        )
    if isinstance(instruction, Line):
        return (
            f'<line x1="{_fmt(instruction.x1)}" y1="{_fmt(instruction.y1)}" '
            f'x2="{_fmt(instruction.x2)}" y2="{_fmt(instruction.y2)}" '
            f'stroke="{instruction.stroke}" stroke-width="{_fmt(instruction.stroke_width)}"{_dash_attr(instruction)}/>'
        )
    if isinstance(instruction, PathStroke):
        return (
            f'<path d="{path_data(instruction)}" fill="none" stroke="{instruction.stroke}" '
            f'stroke-width="{_fmt(instruction.stroke_width)}" stroke-linecap="{instruction.line_cap}"/>'
        )
    if isinstance(instruction, TextRun):
        return _svg_text(instruction, fonts, style)
    if isinstance(instruction, QrMatrix):
        return _svg_qr(instruction)
    raise TypeError(f"Unknown draw instruction: {type(instruction).__name__}")


def _stroke_attrs(rect: RoundedRect) -> str:
    if not rect.stroke:
        return ""
    return f' stroke="{rect.stroke}" stroke-width="{_fmt(rect.stroke_width)}"'


def _dash_attr(line: Line) -> str:
    if not line.dash:
        return ""
    return f' stroke-dasharray="{" ".join(_fmt(d) for d in line.dash)}"'


def _svg_qr(qr: QrMatrix) -> str:
    """Light square plus one path holding every dark module."""
    n = len(qr.modules)
    light = (
        f'<rect x="{_fmt(qr.x)}" y="{_fmt(qr.y)}" width="{_fmt(qr.size)}" '
        f'height="{_fmt(qr.size)}" fill="{qr.light}"/>'
    )
    if n == 0:
        return light
    m = qr.size / n
    cells = [
        f"M{_fmt(qr.x + c * m)} {_fmt(qr.y + r * m)}h{_fmt(m)}v{_fmt(m)}h{_fmt(-m)}z"
        for r, row in enumerate(qr.modules)
        for c, on in enumerate(row)
        if on
    ]
    return (
        f'<g shape-rendering="crispEdges">{light}'
        f'<path d="{"".join(cells)}" fill="{qr.dark}"/></g>'
    )


def path_data(path: PathStroke) -> str:
    parts: List[str] = []
    for command in path.commands:
        op = command[0]
        if op == "A":
            radius, large_arc, sweep, x, y = command[1:]
            parts.append(f"A{_fmt(radius)} {_fmt(radius)} 0 {int(large_arc)} {int(sweep)} {_fmt(x)} {_fmt(y)}")
        else:
            parts.append(op + " ".join(_fmt(v) for v in command[1:]))
    return " ".join(parts)


def _font_family(role: FontRole, fonts: FontSet, style: CardStyle) -> str:
    if role == FontRole.MONO:
        family = style.mono_font_family
    elif role == FontRole.BRAND:
        family = style.brand_font_family
    else:
        family = style.sans_font_family
    configured = fonts.family_name(role)
    if configured:
        family = f"'{configured}',{family}"
    return family


def _svg_text(run: TextRun, fonts: FontSet, style: CardStyle) -> str:
    if not run.text:
        return f'<text x="{_fmt(run.x)}" y="{_fmt(run.y)}"></text>'
    positions = place_glyphs(run, fonts.resolve(run).font)
    xs = " ".join(_fmt(x) for _, x in positions)
    family = _esc(_font_family(run.font_role, fonts, style))
    weight = ' font-weight="bold"' if run.weight == FontWeight.BOLD else ""
    return (
        f'<text x="{xs}" y="{_fmt(run.y)}" font-size="{_fmt(run.font_size)}"{weight} '
        f'fill="{run.fill}" font-family="{family}" text-anchor="start" xml:space="preserve">{_esc(run.text)}</text>'
    )


def rasterize_svg(svg: str, width: int, height: int) -> bytes:
    """Rasterize an SVG document to PNG bytes at the given pixel size."""
    from wand.color import Color as WandColor
    from wand.image import Image as WandImage

    with WandImage(blob=svg.encode("utf-8"), format="svg", background=WandColor("transparent")) as img:
        if (img.width, img.height) != (width, height):
            img.resize(width, height)
        img.format = "png"
        return img.make_blob()


def render_preview_png(layout: CardLayout, fonts: Optional[FontSet] = None, style: Optional[CardStyle] = None) -> bytes:
    """
    Render the link-preview PNG for a layout.

    Raises:
        RenderFailure: On any SVG or rasterization error; no partial image
    """
    try:
        svg = build_card_svg(layout, fonts=fonts, style=style)
        png = rasterize_svg(svg, layout.width, layout.height)
    except Exception as exc:
        logger.exception("[preview] render failed variant=%s", layout.variant)
        raise RenderFailure("Image generation failed") from exc
    if not png:
        raise RenderFailure("Image generation produced no data")
    logger.info(
        "[preview] rendered variant=%s size=%sx%s bytes=%s",
        layout.variant, layout.width, layout.height, len(png),
    )
    return png
