"""
Core domain models for the blind-message card service.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


ANONYMOUS_SENDER = "익명"

# Wire order of the token payload keys
LETTER_FIELDS: Tuple[str, ...] = ("from", "to", "message", "theme")


@dataclass(frozen=True)
class LetterRecord:
    """
    A blind message, as carried by a share link.

    The token built from these four fields is the only copy of the letter;
    there is no identity beyond the field values.
    """
    from_name: str = ""
    to_name: str = ""
    message: str = ""
    theme: str = ""

    @classmethod
    def empty(cls) -> "LetterRecord":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LetterRecord":
        return cls(
            from_name=data["from"],
            to_name=data["to"],
            message=data["message"],
            theme=data["theme"],
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "from": self.from_name,
            "to": self.to_name,
            "message": self.message,
            "theme": self.theme,
        }

    @property
    def has_sender(self) -> bool:
        """A sender is shown unless empty or the anonymous sentinel."""
        return bool(self.from_name) and self.from_name != ANONYMOUS_SENDER

    @property
    def has_recipient(self) -> bool:
        return bool(self.to_name)


# Reveal output: indices of message characters left visible
RevealSet = FrozenSet[int]


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class FontRole(str, Enum):
    """Which configured font family a text run uses."""
    SANS = "sans"
    MONO = "mono"
    BRAND = "brand"


# Draw instructions. Coordinates are pixels in the card's own space,
# y growing downwards; text y is the baseline.

@dataclass(frozen=True)
class FilledRect:
    x: float
    y: float
    width: float
    height: float
    fill: str


@dataclass(frozen=True)
class RoundedRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    fill: str
    stroke: Optional[str] = None
    stroke_width: float = 0.0


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    fill: str


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float = 1.0
    # Dash pattern in pixels (on, off, ...); empty means solid
    dash: Tuple[float, ...] = ()


@dataclass(frozen=True)
class PathStroke:
    """
    An unfilled stroked path.

    commands are absolute SVG-style tuples:
    ("M", x, y), ("L", x, y), ("H", x), ("V", y),
    ("A", r, large_arc, sweep, x, y)  -- circular arcs only
    """
    commands: Tuple[Tuple[Any, ...], ...]
    stroke: str
    stroke_width: float = 1.0
    line_cap: str = "butt"  # "butt" | "round"


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float
    font_size: float
    fill: str
    weight: FontWeight = FontWeight.NORMAL
    align: TextAlign = TextAlign.CENTER
    font_role: FontRole = FontRole.SANS
    letter_spacing: float = 0.0


@dataclass(frozen=True)
class QrMatrix:
    """A QR code drawn as a square of modules, quiet zone included."""
    x: float
    y: float
    size: float
    modules: Tuple[Tuple[bool, ...], ...]
    dark: str
    light: str


DrawInstruction = Union[FilledRect, RoundedRect, Circle, Line, PathStroke, TextRun, QrMatrix]


@dataclass
class CardLayout:
    """The computed layout for one letter card."""
    width: int
    height: int
    instructions: Tuple[DrawInstruction, ...] = field(default_factory=tuple)
    variant: Optional[str] = None

    @property
    def text_runs(self) -> Tuple[TextRun, ...]:
        return tuple(i for i in self.instructions if isinstance(i, TextRun))


# Theme / card styling

@dataclass(frozen=True)
class LetterTheme:
    """Presentation palette picked by the sender; the card layout ignores it."""
    id: str
    name: str
    emoji: str
    accent_color: str


@dataclass(frozen=True)
class CardStyle:
    """
    Colours, fonts, geometry and copy for the card.

    Vertical positions are absolute pixel offsets from the top of the canvas.
    """
    # Palette
    background_color: str = "#18181b"
    panel_color: str = "#27272a"
    lock_circle_color: str = "#3f3f46"
    lock_color: str = "#a1a1aa"
    header_color: str = "#fafafa"
    separator_color: str = "#3f3f46"
    prompt_color: str = "#71717a"
    message_color: str = "#a1a1aa"
    footer_color: str = "#52525b"
    brand_color: str = "#3f3f46"

    # Font families (used by vector output)
    sans_font_family: str = "'Pretendard','Apple SD Gothic Neo',sans-serif"
    mono_font_family: str = "monospace"
    brand_font_family: str = "'Geist','Pretendard',sans-serif"

    # Font sizes
    header_font_size: float = 26
    prompt_font_size: float = 18
    message_font_size: float = 60
    footer_font_size: float = 14
    brand_font_size: float = 13
    message_letter_spacing: float = 6

    # Frame
    panel_margin: float = 20
    panel_radius: float = 20

    # Lock icon
    lock_center_y: float = 68
    lock_circle_radius: float = 28
    lock_body_width: float = 20
    lock_body_height: float = 14
    lock_body_top: float = 62
    lock_body_radius: float = 3
    lock_shackle_radius: float = 6
    lock_shackle_top: float = 57
    lock_stroke_width: float = 3

    # Header block
    header_y: float = 130
    separator_y: float = 155
    separator_inset: float = 50
    prompt_y: float = 190

    # Message block
    message_start_y: float = 240
    message_line_height: float = 76

    # Footer
    footer_margin: float = 40
    min_footer_y: float = 460
    bottom_margin: float = 50
    brand_gap: float = 24

    # Copy
    default_header: str = "블라인드 메시지가 도착했어요"
    sender_and_recipient_header: str = "{sender}님이 {recipient}님에게"
    sender_only_header: str = "{sender}님이 보낸 메시지"
    recipient_only_header: str = "{recipient}님에게 온 메시지"
    prompt_text: str = "제가 하고 싶은 말은..."
    placeholder_message: str = "비밀 메시지"
    footer_text: str = "링크를 열어 비밀 메시지를 확인하세요"
    brand_text: str = "SUILE"


@dataclass(frozen=True)
class CardVariant:
    """A named card configuration: canvas width and message-block budget."""
    name: str
    width: int
    max_chars: int
    max_lines: int
    style: CardStyle = field(default_factory=CardStyle)


@dataclass(frozen=True)
class QrCardStyle:
    """Printable QR letter card: branding, header, QR code and a scan hint."""
    width: int = 600
    height: int = 820

    background_color: str = "#f4f4f5"
    card_color: str = "#ffffff"
    border_color: str = "#e4e4e7"
    brand_color: str = "#18181b"
    subtitle_color: str = "#a1a1aa"
    header_color: str = "#18181b"
    qr_backing_color: str = "#fafafa"
    qr_dark_color: str = "#18181b"
    qr_light_color: str = "#ffffff"
    hint_color: str = "#a1a1aa"
    site_color: str = "#d4d4d8"

    card_margin: float = 16
    card_radius: float = 24
    padding: float = 40

    brand_font_size: float = 28
    subtitle_font_size: float = 13
    header_font_size: float = 22
    hint_font_size: float = 14
    site_font_size: float = 12

    header_line_height: float = 32
    divider_width: float = 1.5
    divider_dash: Tuple[float, ...] = (6, 4)

    qr_size: float = 260
    qr_padding: float = 16
    qr_backing_radius: float = 16
    qr_border: int = 2

    brand_text: str = "SUILE"
    subtitle_text: str = "QR 비밀 메시지"
    closing_text: str = "비밀 메시지에요 💌"
    hint_text: str = "QR코드를 스캔하면 비밀 메시지가 열려요"
