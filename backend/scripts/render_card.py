"""Render a blind-message card from a token or from letter fields.

Usage:
    python -m scripts.render_card --from 지민 --to 서연 --message "생일 축하해" --out card.png
    python -m scripts.render_card --token <token> --backend svg --out preview.png
    python -m scripts.render_card --token <token> --svg-only --out preview.svg
    python -m scripts.render_card --from 지민 --to 서연 --message "생일 축하해" --qr --out qr.png

Useful for checking that the preview and share card stay in step after a style change.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from domain.errors import LetterDecodeError, RenderFailure
from domain.models import LetterRecord
from services.layout_engine import OG_PREVIEW, compute_card_layout, get_variant, list_variants
from services.letter_codec import decode_letter_or_raise, encode_letter
from services.qr_card import compute_qr_card_layout
from services.render_canvas import render_card_png
from services.render_svg import build_card_svg, render_preview_png

logger = logging.getLogger("render_card")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a blind-message card image.")
    parser.add_argument("--token", help="Share token to decode (overrides the field options).")
    parser.add_argument("--from", dest="from_name", default="", help="Sender name.")
    parser.add_argument("--to", dest="to_name", default="", help="Recipient name.")
    parser.add_argument("--message", default="", help="Message body.")
    parser.add_argument("--theme", default="love", help="Theme id.")
    parser.add_argument("--variant", default=OG_PREVIEW, choices=list_variants(), help="Card variant.")
    parser.add_argument(
        "--backend",
        choices=["canvas", "svg"],
        default="canvas",
        help="canvas: Pillow share-card renderer; svg: Wand preview renderer.",
    )
    parser.add_argument("--qr", action="store_true", help="Render the printable QR letter card instead.")
    parser.add_argument("--svg-only", action="store_true", help="Write the SVG document instead of a PNG.")
    parser.add_argument("--out", default="card.png", help="Output filename.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)

    if args.token:
        try:
            record = decode_letter_or_raise(args.token)
        except LetterDecodeError as exc:
            logger.error("Invalid token: %s", exc.reason)
            return 2
        token = args.token
    else:
        record = LetterRecord(
            from_name=args.from_name,
            to_name=args.to_name,
            message=args.message,
            theme=args.theme,
        )
        token = encode_letter(record)

    if args.qr:
        layout = compute_qr_card_layout(record, token)
    else:
        layout = compute_card_layout(record, get_variant(args.variant))
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    if args.svg_only:
        out_path.write_text(build_card_svg(layout), encoding="utf-8")
    elif args.backend == "svg":
        try:
            out_path.write_bytes(render_preview_png(layout))
        except RenderFailure as exc:
            logger.error("Render failed: %s", exc.__cause__ or exc)
            return 1
    else:
        out_path.write_bytes(render_card_png(layout))

    print(token)
    logger.info("Wrote %s (%sx%s, variant=%s)", out_path, layout.width, layout.height, layout.variant)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
