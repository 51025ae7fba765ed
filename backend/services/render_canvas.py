"""
Card renderer using Pillow.

Draws a CardLayout onto an in-memory canvas and exports it as PNG bytes or a
data URL for the downloadable share card. Draws at RENDER_SCALE and
downsamples for smoother edges.
"""
import base64
import logging
import math
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from domain.models import (
    CardLayout, Circle, DrawInstruction, FilledRect, Line, PathStroke, QrMatrix, RoundedRect, TextRun,
)
from services.text_layout import FontSet, parse_color, place_glyphs

logger = logging.getLogger(__name__)

RENDER_SCALE = 2

Point = Tuple[float, float]


def render_card_image(
    layout: CardLayout,
    fonts: Optional[FontSet] = None,
    scale: int = RENDER_SCALE,
) -> Image.Image:
    """Rasterize a layout to an RGB image of exactly layout.width x layout.height."""
    fonts = fonts or FontSet.from_settings()
    canvas = Image.new("RGBA", (layout.width * scale, layout.height * scale), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)

    for instruction in layout.instructions:
        _draw_instruction(draw, instruction, fonts, scale)

    if scale != 1:
        canvas = canvas.resize((layout.width, layout.height), resample=Image.Resampling.LANCZOS)
    return canvas.convert("RGB")


def render_card_png(layout: CardLayout, fonts: Optional[FontSet] = None) -> bytes:
    image = render_card_image(layout, fonts=fonts)
    buf = BytesIO()
    image.save(buf, format="PNG")
    data = buf.getvalue()
    logger.info(
        "[card] rendered variant=%s size=%sx%s bytes=%s",
        layout.variant, layout.width, layout.height, len(data),
    )
    return data


def render_card_data_url(layout: CardLayout, fonts: Optional[FontSet] = None) -> str:
    """PNG as an embeddable data URL, ready for download or sharing."""
    png = render_card_png(layout, fonts=fonts)
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def _draw_instruction(draw: ImageDraw.ImageDraw, instruction: DrawInstruction, fonts: FontSet, scale: int) -> None:
    s = scale
    if isinstance(instruction, FilledRect):
        draw.rectangle(
            _box(instruction.x, instruction.y, instruction.width, instruction.height, s),
            fill=parse_color(instruction.fill),
        )
    elif isinstance(instruction, RoundedRect):
        draw.rounded_rectangle(
            _box(instruction.x, instruction.y, instruction.width, instruction.height, s),
            radius=instruction.radius * s,
            fill=parse_color(instruction.fill),
            outline=parse_color(instruction.stroke) if instruction.stroke else None,
            width=max(1, int(round(instruction.stroke_width * s))) if instruction.stroke else 1,
        )
    elif isinstance(instruction, Circle):
        r = instruction.radius * s
        cx, cy = instruction.cx * s, instruction.cy * s
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=parse_color(instruction.fill))
    elif isinstance(instruction, Line):
        fill = parse_color(instruction.stroke)
        width = max(1, int(round(instruction.stroke_width * s)))
        for (x1, y1), (x2, y2) in dash_segments(instruction):
            draw.line([(x1 * s, y1 * s), (x2 * s, y2 * s)], fill=fill, width=width)
    elif isinstance(instruction, PathStroke):
        _draw_path(draw, instruction, s)
    elif isinstance(instruction, TextRun):
        _draw_text(draw, instruction, fonts, s)
    elif isinstance(instruction, QrMatrix):
        _draw_qr(draw, instruction, s)
    else:
        raise TypeError(f"Unknown draw instruction: {type(instruction).__name__}")


def _box(x: float, y: float, w: float, h: float, s: float) -> Tuple[float, float, float, float]:
    # Pillow boxes include the far edge
    return (x * s, y * s, (x + w) * s - 1, (y + h) * s - 1)


def _draw_text(draw: ImageDraw.ImageDraw, run: TextRun, fonts: FontSet, s: int) -> None:
    if not run.text:
        return
    # Positions come from the 1x font so they match the SVG output exactly
    positions = place_glyphs(run, fonts.resolve(run).font)
    resolved = fonts.resolve(run, scale=s)
    fill = parse_color(run.fill)
    stroke_width = max(1, s // 2) if resolved.synthetic_bold else 0
    for ch, x in positions:
        if ch.isspace():
            continue
        draw.text(
            (x * s, run.y * s),
            ch,
            font=resolved.font,
            fill=fill,
            anchor="ls",
            stroke_width=stroke_width,
            stroke_fill=fill,
        )


def _draw_path(draw: ImageDraw.ImageDraw, path: PathStroke, s: int) -> None:
    color = parse_color(path.stroke)
    width = max(1, int(round(path.stroke_width * s)))
    vertices: List[Point] = []
    current: Optional[Point] = None

    for command in path.commands:
        op = command[0]
        if op == "M":
            current = (command[1], command[2])
            vertices.append(current)
            continue
        if current is None:
            raise ValueError(f"Path command {op!r} before a move")
        if op == "L":
            target = (command[1], command[2])
        elif op == "H":
            target = (command[1], current[1])
        elif op == "V":
            target = (current[0], command[1])
        elif op == "A":
            radius, large_arc, sweep, x, y = command[1:]
            target = (x, y)
            _draw_arc(draw, current, target, radius, bool(large_arc), bool(sweep), color, width, s)
            current = target
            vertices.append(target)
            continue
        else:
            raise ValueError(f"Unsupported path command: {op!r}")
        draw.line([(current[0] * s, current[1] * s), (target[0] * s, target[1] * s)], fill=color, width=width)
        current = target
        vertices.append(target)

    if path.line_cap == "round":
        half = width / 2
        for vx, vy in vertices:
            draw.ellipse((vx * s - half, vy * s - half, vx * s + half, vy * s + half), fill=color)


def dash_segments(line: Line) -> List[Tuple[Point, Point]]:
    """Pieces of a line that get ink; a solid line is a single piece."""
    start, end = (line.x1, line.y1), (line.x2, line.y2)
    pattern = [d for d in line.dash if d > 0]
    length = math.hypot(line.x2 - line.x1, line.y2 - line.y1)
    if not pattern or length == 0:
        return [(start, end)]

    ux = (line.x2 - line.x1) / length
    uy = (line.y2 - line.y1) / length
    segments: List[Tuple[Point, Point]] = []
    pos = 0.0
    i = 0
    # even steps draw, odd steps skip, like SVG stroke-dasharray
    while pos < length:
        step = pattern[i % len(pattern)]
        if i % 2 == 0:
            stop = min(pos + step, length)
            segments.append(((line.x1 + ux * pos, line.y1 + uy * pos), (line.x1 + ux * stop, line.y1 + uy * stop)))
        pos += step
        i += 1
    return segments


def module_edges(origin: float, size: float, count: int, s: int) -> List[int]:
    """Pixel edges of count equal cells; shared edges leave no gaps between modules."""
    return [int(round((origin + size * i / count) * s)) for i in range(count + 1)]


def _draw_qr(draw: ImageDraw.ImageDraw, qr: QrMatrix, s: int) -> None:
    n = len(qr.modules)
    if n == 0:
        return
    xs = module_edges(qr.x, qr.size, n, s)
    ys = module_edges(qr.y, qr.size, n, s)
    draw.rectangle((xs[0], ys[0], xs[-1] - 1, ys[-1] - 1), fill=parse_color(qr.light))
    dark = parse_color(qr.dark)
    for r, row in enumerate(qr.modules):
        for c, on in enumerate(row):
            if on:
                draw.rectangle((xs[c], ys[r], xs[c + 1] - 1, ys[r + 1] - 1), fill=dark)


def arc_center(
    start: Point,
    end: Point,
    radius: float,
    large_arc: bool,
    sweep: bool,
) -> Tuple[Point, float, float, float]:
    """
    Convert an SVG circular arc from endpoint form to centre form.

    Returns ((cx, cy), radius, start_deg, end_deg), angles in Pillow's
    clockwise-from-3-o'clock convention, ordered for a clockwise sweep.
    """
    x0, y0 = start
    x1, y1 = end
    hx = (x0 - x1) / 2
    hy = (y0 - y1) / 2
    r = abs(radius)
    chord_sq = hx * hx + hy * hy
    if chord_sq > r * r:
        r = math.sqrt(chord_sq)

    num = r * r * r * r - r * r * hy * hy - r * r * hx * hx
    den = r * r * hy * hy + r * r * hx * hx
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * hy
    cyp = -coef * hx
    cx = cxp + (x0 + x1) / 2
    cy = cyp + (y0 + y1) / 2

    a0 = math.degrees(math.atan2(y0 - cy, x0 - cx))
    a1 = math.degrees(math.atan2(y1 - cy, x1 - cx))
    if not sweep:
        a0, a1 = a1, a0
    while a1 < a0:
        a1 += 360
    return (cx, cy), r, a0, a1


def _draw_arc(
    draw: ImageDraw.ImageDraw,
    start: Point,
    end: Point,
    radius: float,
    large_arc: bool,
    sweep: bool,
    color: Sequence[int],
    width: int,
    s: int,
) -> None:
    (cx, cy), r, a0, a1 = arc_center(start, end, radius, large_arc, sweep)
    draw.arc(
        ((cx - r) * s, (cy - r) * s, (cx + r) * s, (cy + r) * s),
        start=a0,
        end=a1,
        fill=tuple(color),
        width=width,
    )
